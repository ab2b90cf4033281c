"""Surface language: lexer, parser, AST and printers."""
