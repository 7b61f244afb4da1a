"""FFmpeg process supervisor.

Launches ffmpeg with hardware-acceleration arguments, turns its progress
output into structured events, and offers pause, resume and cancel over
the running process.
"""

__version__ = "0.1.0"
