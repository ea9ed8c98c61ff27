"""D6 school-information bridge: hybrid cache / upstream / mock resolution behind a tool-call surface."""

__version__ = "0.1.0"
