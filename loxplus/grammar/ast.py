"""Abstract syntax tree for Lox-plus. Every node is a plain dataclass: expressions and statements are two closed sets of
variants, and the pipeline stages (resolver, interpreter) dispatch on the concrete variant.

Formally, the grammar recognized by the parser (see lang/parse.py) is

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER "{" <function>* "}"
<var_decl>    ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <fun_decl> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt>
                | <while_stmt> | <block>
<fun_decl>    ::= "fun" <function>
<function>    ::= IDENTIFIER "(" <parameters>? ")" <block>   ; at most 8 parameters
<for_stmt>    ::= "for" "(" ( <var_decl> | <expr_stmt> | ";" ) <expression>? ";" <expression>? ")" <statement>
                                                            ; desugared into While, no For node exists
<expression>  ::= <assignment>
<assignment>  ::= ( <call> "." )? IDENTIFIER "=" <assignment> | <logic_or>
<logic_or>    ::= <logic_and> ( "or" <logic_and> )*
<logic_and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <addition> ( ( ">" | ">=" | "<" | "<=" ) <addition> )*
<addition>    ::= <multiplication> ( ( "-" | "+" ) <multiplication> )*
<multiplication> ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENTIFIER )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
```

Nodes compare and hash by identity (eq=False): the resolver keys its scope-distance map on the node object itself, and two
textually identical references (`x + x`) must stay distinct.
"""

from dataclasses import dataclass, fields
from typing import Any, List, Optional

from loxplus.grammar.tokens import Token


class Node:
    """Superclass of every AST node. Only provides debugging display."""

    def display(self, indents=0):
        """Recursively displays the tree rooted at this node with a readable format.

        Format:
        <Node>(<attr>=<value>, nodes=[
            <Node>(<attr>=<value>, nodes=[
                ...
                <Node>(<attr>=<value>)  # <-- if node has no children
            ])
        ])
        """
        attrs, children = [], []
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Node):
                children.append(value)
            elif isinstance(value, list) and all(isinstance(item, Node) for item in value) and value:
                children.extend(value)
            elif isinstance(value, list):
                attrs.append(f"{field.name}=[{', '.join(str(item) for item in value)}]")
            elif isinstance(value, Token):
                attrs.append(f"{field.name}='{value.lexeme}'")
            else:
                attrs.append(f"{field.name}={value!r}")

        result = f"{'    ' * indents}{type(self).__name__}({', '.join(attrs)}"
        if children:
            result += ", " if attrs else ""
            result += "nodes=["
            for child in children:
                result += "\n" + child.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()


class Expr(Node):
    """Superclass of expression nodes."""


class Stmt(Node):
    """Superclass of statement nodes."""


@dataclass(eq=False)
class Literal(Expr):
    value: Any


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    methods: List[Function]
