"""
Deployment-wide CAD settings (singleton row), logo upload and feature toggles.
"""
