# Glass Gateway - Master Auto Glass SOAP integration
__version__ = "1.0.0"
