# src/ddply/__init__.py
