"""Organization Manager package.

This package is organized by feature modules (assets, leaves, attendance,
notifications, ...) with a thin Flask controller layer and service/repository
layers underneath.
"""
