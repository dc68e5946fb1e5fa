import unittest

from loxplus.grammar import ast
from loxplus.grammar.tokens import Token, TokenType


def token(token_type, lexeme):
    return Token(token_type, lexeme, None, 1)


class DisplayTestCase(unittest.TestCase):

    def test_display(self):
        tree = ast.Print(ast.Binary(ast.Literal(1.0), token(TokenType.PLUS, "+"), ast.Literal(2.0)))
        expected = (
            "Print(nodes=[\n"
            "    Binary(operator='+', nodes=[\n"
            "        Literal(value=1.0),\n"
            "        Literal(value=2.0)\n"
            "    ])\n"
            "])"
        )
        self.assertEqual(expected, tree.display())
        self.assertEqual(expected, str(tree))

    def test_leaf_attributes(self):
        cases = {
            ast.Literal(None): "Literal(value=None)",
            ast.Literal("s"): "Literal(value='s')",
            ast.Variable(token(TokenType.IDENTIFIER, "x")): "Variable(name='x')",
            ast.Var(token(TokenType.IDENTIFIER, "x"), None): "Var(name='x', initializer=None)",
            ast.Block([]): "Block(statements=[])",
        }
        for node, expected in cases.items():
            self.assertEqual(expected, node.display(), expected)

    def test_function_params(self):
        function = ast.Function(
            token(TokenType.IDENTIFIER, "f"),
            [token(TokenType.IDENTIFIER, "a"), token(TokenType.IDENTIFIER, "b")],
            [ast.Return(token(TokenType.RETURN, "return"), None)],
        )
        self.assertEqual(
            "Function(name='f', params=[a, b], nodes=[\n    Return(keyword='return', value=None)\n])",
            function.display()
        )

    def test_nodes_compare_by_identity(self):
        first = ast.Variable(token(TokenType.IDENTIFIER, "x"))
        second = ast.Variable(token(TokenType.IDENTIFIER, "x"))
        self.assertNotEqual(first, second)
        self.assertEqual(2, len({first: 0, second: 1}))


if __name__ == '__main__':
    unittest.main()
