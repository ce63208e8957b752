"""
Scanner for Lox - Recursive Descent Parser front end

Tokenizes Lox source code into a list of tokens.

Features:
- Single-pass tokenization
- Line tracking (strings may span lines)
- Never stops at the first error: bad characters and unterminated strings
  are reported and scanning carries on to EOF
"""

from typing import List, Optional

from .token_types import TT, Tok, Literal
from .types import LoxError, Reporter

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(LoxError):
    """Scan error with line info"""
    def __init__(self, message: str, line: int):
        self.message = message
        self.line = line
        super().__init__(f"[line {line}] Error: {message}")


class Lexer:
    """
    Lox scanner.

    State is {start, pos, line}: `start` marks the first character of the
    lexeme being scanned, `pos` the next unread character.
    """

    # Keyword mapping
    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
        'const': TT.CONST,
    }

    SINGLE = {
        '(': TT.LEFT_PAREN,
        ')': TT.RIGHT_PAREN,
        '{': TT.LEFT_BRACE,
        '}': TT.RIGHT_BRACE,
        ',': TT.COMMA,
        '.': TT.DOT,
        '-': TT.MINUS,
        '+': TT.PLUS,
        ';': TT.SEMICOLON,
        '*': TT.STAR,
    }

    # char => (type when followed by '=', type otherwise)
    WITH_EQUAL = {
        '!': (TT.BANG_EQUAL, TT.BANG),
        '=': (TT.EQUAL_EQUAL, TT.EQUAL),
        '<': (TT.LESS_EQUAL, TT.LESS),
        '>': (TT.GREATER_EQUAL, TT.GREATER),
    }

    def __init__(self, source: str, reporter: Optional[Reporter] = None):
        self.source = source
        self.reporter = reporter
        self.start = 0
        self.pos = 0
        self.line = 1
        self.tokens: List[Tok] = []
        self.errors: List[LexError] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        self.tokens = []

        while not self.at_end():
            self.start = self.pos
            self.scan_token()

        self.tokens.append(Tok(TT.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        c = self.advance()

        if c in self.SINGLE:
            self.emit(self.SINGLE[c])
            return

        if c in self.WITH_EQUAL:
            paired, alone = self.WITH_EQUAL[c]
            self.emit(paired if self.match('=') else alone)
            return

        if c == '/':
            if self.match('/'):
                self.skip_comment()
            else:
                self.emit(TT.SLASH)
            return

        if c in (' ', '\r', '\t'):
            return

        if c == '\n':
            self.line += 1
            return

        if c == '"':
            self.scan_string()
            return

        if is_digit(c):
            self.scan_number()
            return

        if is_alpha(c):
            self.scan_identifier()
            return

        self.error("Unexpected character.")

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def skip_comment(self):
        """Skip `//` comment to end of line (newline left for the main loop)"""
        while self.peek() != '\n' and not self.at_end():
            self.advance()

    def scan_string(self):
        """Scan a string literal; no escapes, may span lines"""
        while self.peek() != '"' and not self.at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.at_end():
            self.error("Unterminated string.")
            return

        # Closing quote
        self.advance()
        self.emit(TT.STRING, self.source[self.start + 1:self.pos - 1])

    def scan_number(self):
        """Scan integer or decimal; a trailing '.' without digit is not consumed"""
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == '.' and is_digit(self.peek(1)):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.emit(TT.NUMBER, float(self.source[self.start:self.pos]))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while is_alnum(self.peek()):
            self.advance()

        text = self.source[self.start:self.pos]
        self.emit(self.KEYWORDS.get(text, TT.IDENTIFIER))

    # ========================================================================
    # Helpers
    # ========================================================================

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character ('\\0' past the end)"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self) -> str:
        """Consume and return current character"""
        c = self.source[self.pos]
        self.pos += 1
        return c

    def match(self, expected: str) -> bool:
        """Consume the current character if it equals `expected`"""
        if self.at_end() or self.source[self.pos] != expected:
            return False
        self.pos += 1
        return True

    def emit(self, token_type: TT, literal: Literal = None):
        """Emit token for the current lexeme"""
        text = self.source[self.start:self.pos]
        self.tokens.append(Tok(token_type, text, literal, self.line))

    def error(self, message: str):
        err = LexError(message, self.line)
        self.errors.append(err)
        if self.reporter is not None:
            self.reporter.error(self.line, "", message)


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'

def is_alpha(c: str) -> bool:
    return 'a' <= c <= 'z' or 'A' <= c <= 'Z' or c == '_'

def is_alnum(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


def tokenize(source: str, reporter: Optional[Reporter] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, reporter)
    return lexer.tokenize()
