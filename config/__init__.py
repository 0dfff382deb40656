import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module, development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def device_sync_from_env() -> dict:
    """Device sync settings shared by every environment."""
    return {
        "device_ip": os.getenv("DEVICE_IP", "192.168.1.201"),
        "device_port": int(os.getenv("DEVICE_PORT", "4370")),
        "timeout_seconds": int(os.getenv("DEVICE_TIMEOUT", "5")),
        "server_url": os.getenv("SYNC_SERVER_URL", "http://localhost:5000"),
        "device_id": os.getenv("DEVICE_ID", ""),
        "poll_seconds": int(os.getenv("SYNC_POLL_SECONDS", "30")),
        "watermark_path": os.getenv("SYNC_WATERMARK_FILE", ".device_sync_state.json"),
    }
