"""
uetail - live terminal viewer for Unreal editor and game-build logs.

Tails the log file of a selected project or packaged build, splits it into
timestamp / category / message, colours it by severity and tracks cook
progress while the log is growing.
"""

__version__ = '0.3.0'
