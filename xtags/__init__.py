# xtags: tag files and directories with extended attributes

__version__ = '0.1.0'
