"""codeparse: a language-agnostic model of parsed source code.

Usage:
    from src.code_parsing import create_parser

    parsed = create_parser(path="Main.java").parse_code(source)
"""

__version__ = "0.1.0"
