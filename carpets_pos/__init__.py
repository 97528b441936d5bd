"""Capa de comandos del punto de venta de alfombras (productos, ventas, compras, login)."""

__version__ = '1.0.0'
