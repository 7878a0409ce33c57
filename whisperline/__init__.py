"""
Whisperline - typed speech-to-text bridge over an embedded inference script.

Loads the faster-whisper inference script into an isolated runtime, calls
its entry points under a process-wide execution lock, and decodes the raw
segment tuples into typed results.
"""

__version__ = "0.1.0"
