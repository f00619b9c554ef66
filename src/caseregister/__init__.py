"""
Case Register - record speech, transcribe it remotely, organize it by case.
"""

__version__ = "0.1.0"
