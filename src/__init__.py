"""JDK installer — provisions Temurin/AdoptOpenJDK builds onto hosts."""

__version__ = "0.1.0"
