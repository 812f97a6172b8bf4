"""
Splax abstract syntax tree
Closed sets of expression and statement nodes; every consumer dispatches
over them with isinstance, so adding a node means updating each dispatcher
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from tokens import Token


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Binary:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Grouping:
    expression: 'Expr'


@dataclass(frozen=True)
class Literal:
    value: Dict


@dataclass(frozen=True)
class Unary:
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Variable:
    name: Token


@dataclass(frozen=True)
class Assignment:
    name: Token
    value: 'Expr'


@dataclass(frozen=True)
class Logical:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Call:
    callee: 'Expr'
    paren: Token
    arguments: Tuple['Expr', ...]


Expr = Union[Binary, Grouping, Literal, Unary, Variable, Assignment, Logical, Call]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class ExprStmt:
    expression: Expr


@dataclass(frozen=True)
class Print:
    expression: Expr


@dataclass(frozen=True)
class Let:
    name: Token
    initializer: Optional[Expr]


@dataclass(frozen=True)
class Block:
    statements: Tuple['Stmt', ...]


@dataclass(frozen=True)
class If:
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt']


@dataclass(frozen=True)
class While:
    condition: Expr
    body: 'Stmt'


@dataclass(frozen=True)
class Function:
    name: Token
    params: Tuple[Token, ...]
    body: Tuple['Stmt', ...]


@dataclass(frozen=True)
class Return:
    keyword: Token
    value: Optional[Expr]


Stmt = Union[ExprStmt, Print, Let, Block, If, While, Function, Return]
