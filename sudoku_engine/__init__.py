# -*- coding: utf-8 -*-
"""Sudoku Engine"""

__version__ = "0.1.0"
