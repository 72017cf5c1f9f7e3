"""
Cracha - padronização de fotos de funcionários para crachás.
"""

__version__ = "0.1.0"
