"""simplang: scanner, parser and tree-walking interpreter for a small integer expression language.

Basic program flow:
    1. Scanner: turns source text into located tokens (lang/scanner.py)
    2. Parser: recursive descent for primary expressions, shunting-yard for binary expressions (lang/parser.py)
    3. Evaluator: walks the syntax tree against a per-run Context of bindings, functions and trace
       (lang/evaluator.py, lang/environment.py)
"""
