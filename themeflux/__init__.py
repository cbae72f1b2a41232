"""Switch editor themes between a day and a night pair at sunrise and sunset."""

PACKAGE_NAME = "theme-flux-solar"
__version__ = "0.3.0"
