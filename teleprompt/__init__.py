"""
Teleprompt - Terminal teleprompter for memorizing text

Plays a card of text one word at a time at an adjustable pace (30-300 words
per minute), with word highlighting, click-to-jump, stepping and a pace
slider. Cards can be typed in or loaded from TXT, Markdown, HTML, DOCX, PDF
and RTF documents.
"""

__version__ = "0.1.0"
__author__ = "Teleprompt Developers"
