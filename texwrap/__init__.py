"""
texwrap - Typeset EXternal WRAPper

Stores LaTeX source in a file and renders it to PDF with an external engine
(pdflatex, lualatex, xelatex, ...) invoked as a subprocess.

Architecture:
- Rendering Context: source file lifecycle, engine invocation, side-file cleanup
- Utils: logging setup, PDF inspection, timestamps
"""

__version__ = "0.1.0"
