"""
Recursive Descent Parser for Lox

Structure:
- Scanner: token list from source (lexer_rd)
- Parser: recursive descent, one precedence level per method
- AST: dataclass nodes from tree.py

Errors do not stop the parse: each top-level declaration catches its own
ParseError and the parser synchronizes to the next statement boundary, so a
single run reports every independent syntax error.
"""

from typing import Optional, List

from . import tree as ast
from .token_types import TT, Tok
from .types import LoxError, Reporter

MAX_ARGS = 255

# Tokens that start a declaration or statement: synchronization stops before these.
_SYNC_STARTS = {
    TT.CLASS,
    TT.FUN,
    TT.VAR,
    TT.FOR,
    TT.IF,
    TT.WHILE,
    TT.PRINT,
    TT.RETURN,
    TT.CONST,
}

# ============================================================================
# Parser
# ============================================================================

class ParseError(LoxError):
    """Parse error with position info"""
    def __init__(self, message: str, token: Tok):
        self.message = message
        self.token = token
        self.line = token.line
        super().__init__(f"[line {token.line}] Error{error_location(token)}: {message}")


def error_location(token: Tok) -> str:
    if token.type == TT.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=), right-associative
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (>, >=, <, <=)
    6. term (+, -)
    7. factor (*, /)
    8. unary (!, -)
    9. call / property access (f(), a.b)
    10. primary (literals, identifiers, this, super, parens)
    """

    def __init__(self, tokens: List[Tok], reporter: Optional[Reporter] = None):
        self.tokens = tokens
        self.pos = 0
        self.reporter = reporter
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self) -> Tok:
        """Current (unconsumed) token"""
        return self.tokens[self.pos]

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.peek().type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and return it"""
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        if self.at_end():
            return False
        return self.peek().type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token: Tok, message: str) -> ParseError:
        """Report an error and return it so the caller decides whether to raise"""
        err = ParseError(message, token)
        self.errors.append(err)

        if self.reporter is not None:
            self.reporter.error(token.line, error_location(token), message)

        return err

    def synchronize(self) -> None:
        """Discard tokens until a statement boundary"""
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMICOLON:
                return

            if self.peek().type in _SYNC_STARTS:
                return

            self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[ast.Stmt]:
        """Parse entire program"""
        statements: List[ast.Stmt] = []

        while not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        return statements

    # ========================================================================
    # Declarations
    # ========================================================================

    def parse_declaration(self) -> Optional[ast.Stmt]:
        try:
            if self.match(TT.CLASS):
                return self.parse_class_decl()
            if self.match(TT.FUN):
                return self.parse_function("function")
            if self.match(TT.CONST):
                return self.parse_const_decl()
            if self.match(TT.VAR):
                return self.parse_var_decl()

            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_class_decl(self) -> ast.Stmt:
        """
        class Name (< Superclass)? { method* }
        """
        name = self.expect(TT.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TT.LESS):
            self.expect(TT.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(self.previous())

        self.expect(TT.LEFT_BRACE, "Expect '{' before class body.")

        methods: List[ast.Function] = []
        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            methods.append(self.parse_function("method"))

        self.expect(TT.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, methods)

    def parse_function(self, kind: str) -> ast.Function:
        """
        name ( params? ) { body }

        `kind` is "function" or "method", used in error messages.
        """
        name = self.expect(TT.IDENTIFIER, f"Expect {kind} name.")
        self.expect(TT.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params: List[Tok] = []
        if not self.check(TT.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters.")

                params.append(self.expect(TT.IDENTIFIER, "Expect parameter name."))

                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RIGHT_PAREN, "Expect ')' after parameters.")
        self.expect(TT.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.parse_block()

        return ast.Function(name, params, body)

    def parse_var_decl(self) -> ast.Stmt:
        name = self.expect(TT.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TT.EQUAL):
            initializer = self.parse_expr()

        self.expect(TT.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    def parse_const_decl(self) -> ast.Stmt:
        # Missing initializer is legal syntax; the resolver rejects it.
        name = self.expect(TT.IDENTIFIER, "Expect constant name.")

        initializer = None
        if self.match(TT.EQUAL):
            initializer = self.parse_expr()

        self.expect(TT.SEMICOLON, "Expect ';' after constant declaration.")
        return ast.Const(name, initializer)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> ast.Stmt:
        if self.match(TT.FOR):
            return self.parse_for_stmt()
        if self.match(TT.IF):
            return self.parse_if_stmt()
        if self.match(TT.PRINT):
            return self.parse_print_stmt()
        if self.match(TT.RETURN):
            return self.parse_return_stmt()
        if self.match(TT.WHILE):
            return self.parse_while_stmt()
        if self.match(TT.LEFT_BRACE):
            return ast.Block(self.parse_block())

        return self.parse_expr_stmt()

    def parse_for_stmt(self) -> ast.Stmt:
        """
        for ( init? ; cond? ; incr? ) body

        Desugared to:
            { init; while (cond) { body; incr; } }
        """
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'for'.")

        initializer: Optional[ast.Stmt]
        if self.match(TT.SEMICOLON):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        condition = None
        if not self.check(TT.SEMICOLON):
            condition = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TT.RIGHT_PAREN):
            increment = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.parse_statement()

        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])

        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)

        if initializer is not None:
            body = ast.Block([initializer, body])

        return body

    def parse_if_stmt(self) -> ast.Stmt:
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.parse_statement()

        return ast.If(condition, then_branch, else_branch)

    def parse_print_stmt(self) -> ast.Stmt:
        value = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def parse_return_stmt(self) -> ast.Stmt:
        keyword = self.previous()

        value = None
        if not self.check(TT.SEMICOLON):
            value = self.parse_expr()

        self.expect(TT.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def parse_while_stmt(self) -> ast.Stmt:
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.parse_statement()

        return ast.While(condition, body)

    def parse_block(self) -> List[ast.Stmt]:
        """Statements up to the closing brace (opening brace already consumed)"""
        statements: List[ast.Stmt] = []

        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        self.expect(TT.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_expr_stmt(self) -> ast.Stmt:
        expr = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> ast.Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> ast.Expr:
        expr = self.parse_or()

        if not self.match(TT.EQUAL):
            return expr

        equals = self.previous()
        value = self.parse_assignment()

        match expr:
            case ast.Variable(name=name):
                return ast.Assign(name, value)
            case ast.Get(object=obj, name=name):
                return ast.Set(obj, name, value)

        # Reported but not raised: the statement still parses.
        self.error(equals, "Invalid assignment target.")
        return expr

    def parse_or(self) -> ast.Expr:
        expr = self.parse_and()

        while self.match(TT.OR):
            op = self.previous()
            right = self.parse_and()
            expr = ast.Logical(expr, op, right)

        return expr

    def parse_and(self) -> ast.Expr:
        expr = self.parse_equality()

        while self.match(TT.AND):
            op = self.previous()
            right = self.parse_equality()
            expr = ast.Logical(expr, op, right)

        return expr

    def parse_equality(self) -> ast.Expr:
        return self._parse_binary(self.parse_comparison, TT.BANG_EQUAL, TT.EQUAL_EQUAL)

    def parse_comparison(self) -> ast.Expr:
        return self._parse_binary(
            self.parse_term, TT.GREATER, TT.GREATER_EQUAL, TT.LESS, TT.LESS_EQUAL
        )

    def parse_term(self) -> ast.Expr:
        return self._parse_binary(self.parse_factor, TT.MINUS, TT.PLUS)

    def parse_factor(self) -> ast.Expr:
        return self._parse_binary(self.parse_unary, TT.SLASH, TT.STAR)

    def _parse_binary(self, operand, *ops: TT) -> ast.Expr:
        """Left-associative binary level"""
        expr = operand()

        while self.match(*ops):
            op = self.previous()
            right = operand()
            expr = ast.Binary(expr, op, right)

        return expr

    def parse_unary(self) -> ast.Expr:
        if self.match(TT.BANG, TT.MINUS):
            op = self.previous()
            right = self.parse_unary()
            return ast.Unary(op, right)

        return self.parse_call()

    def parse_call(self) -> ast.Expr:
        """Postfix chain: calls and property access fold left"""
        expr = self.parse_primary()

        while True:
            if self.match(TT.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self.match(TT.DOT):
                name = self.expect(TT.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def _finish_call(self, callee: ast.Expr) -> ast.Expr:
        arguments: List[ast.Expr] = []

        if not self.check(TT.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} arguments.")

                arguments.append(self.parse_expr())

                if not self.match(TT.COMMA):
                    break

        paren = self.expect(TT.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, arguments)

    def parse_primary(self) -> ast.Expr:
        if self.match(TT.FALSE):
            return ast.Literal(False)
        if self.match(TT.TRUE):
            return ast.Literal(True)
        if self.match(TT.NIL):
            return ast.Literal(None)

        if self.match(TT.NUMBER, TT.STRING):
            return ast.Literal(self.previous().literal)

        if self.match(TT.SUPER):
            keyword = self.previous()
            self.expect(TT.DOT, "Expect '.' after 'super'.")
            method = self.expect(TT.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(keyword, method)

        if self.match(TT.THIS):
            return ast.This(self.previous())

        if self.match(TT.IDENTIFIER):
            return ast.Variable(self.previous())

        if self.match(TT.LEFT_PAREN):
            expr = self.parse_expr()
            self.expect(TT.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")


def parse_source(source: str, reporter: Optional[Reporter] = None) -> List[ast.Stmt]:
    """Scan and parse `source`; errors go to `reporter` and are otherwise dropped"""
    from .lexer_rd import tokenize

    return Parser(tokenize(source, reporter), reporter).parse()
