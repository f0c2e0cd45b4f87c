import math

import pytest
from hypothesis import given
from hypothesis import strategies as st
from hypothesis.strategies import composite

from climb.climb_ast import (
    Binary,
    Call,
    Const,
    Expr,
    Ident,
    Negate,
    add,
    bin_,
    call,
    div,
    ident,
    mod,
    mul,
    neg,
    num,
    sub,
)
from climb.climb_constants import (
    DIVIDE,
    EOF,
    IDENT,
    LPAREN,
    MIN_PRECEDENCE,
    MINUS,
    MODULO,
    NUMLIT,
    PLUS,
    RPAREN,
    TIMES,
    BinOp,
    Precedence,
    format_number,
)
from climb.climb_errors import ParseError, ParseErrorKind
from climb.climb_eval import Evaluator
from climb.climb_lexer import Token, tokenize
from climb.climb_parser import Parser, binop_of, parse, precedence_of
from climb.climb_transpile import render


def id_(name: str) -> Token:
    return Token.ident(name)


def n(value: float) -> Token:
    return Token.num(value)


def t(kind: str) -> Token:
    return Token.of(kind)


def parse_src(source: str) -> Expr:
    return parse(tokenize(source))


def same_value(a: float, b: float) -> bool:
    return (math.isnan(a) and math.isnan(b)) or a == b


# ---------------------------------------------------------------------------
# Precedence table
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "kind,expected",
    [
        (PLUS, Precedence.ADD),
        (MINUS, Precedence.ADD),
        (TIMES, Precedence.MUL),
        (DIVIDE, Precedence.MUL),
        (MODULO, Precedence.MUL),
        (LPAREN, Precedence.NONE),
        (RPAREN, Precedence.NONE),
        (EOF, Precedence.NONE),
    ],
)
def test_precedence_of_punctuation(kind: str, expected: Precedence) -> None:
    assert precedence_of(t(kind)) is expected


def test_precedence_of_payload_tokens_is_none() -> None:
    assert precedence_of(id_("x")) is Precedence.NONE
    assert precedence_of(n(3)) is Precedence.NONE


def test_precedence_order() -> None:
    assert Precedence.NONE < Precedence.ADD < Precedence.MUL
    assert MIN_PRECEDENCE is Precedence.ADD
    assert Precedence.MUL.is_higher_than(Precedence.ADD)
    assert Precedence.ADD.is_at_least(Precedence.ADD)
    assert not Precedence.NONE.is_at_least(MIN_PRECEDENCE)


@pytest.mark.parametrize(
    "kind,op",
    [
        (PLUS, BinOp.ADD),
        (MINUS, BinOp.SUB),
        (TIMES, BinOp.MUL),
        (DIVIDE, BinOp.DIV),
        (MODULO, BinOp.MOD),
    ],
)
def test_binop_of_operators(kind: str, op: BinOp) -> None:
    assert binop_of(t(kind)) is op


@pytest.mark.parametrize("token", [Token.of(LPAREN), Token.of(EOF), Token.ident("x"), Token.num(1)])
def test_binop_of_non_operator_is_an_internal_fault(token: Token) -> None:
    with pytest.raises(AssertionError, match="binop_of"):
        binop_of(token)


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "tokens,expected",
    [
        # a + b + c
        (
            [id_("a"), t(PLUS), id_("b"), t(PLUS), id_("c")],
            add(add(ident("a"), ident("b")), ident("c")),
        ),
        # a * b * c
        (
            [id_("a"), t(TIMES), id_("b"), t(TIMES), id_("c")],
            mul(mul(ident("a"), ident("b")), ident("c")),
        ),
        # a * b + c
        (
            [id_("a"), t(TIMES), id_("b"), t(PLUS), id_("c")],
            add(mul(ident("a"), ident("b")), ident("c")),
        ),
        # a + b * c
        (
            [id_("a"), t(PLUS), id_("b"), t(TIMES), id_("c")],
            add(ident("a"), mul(ident("b"), ident("c"))),
        ),
        # 27 / 3 / 9
        (
            [n(27), t(DIVIDE), n(3), t(DIVIDE), n(9)],
            div(div(num(27), num(3)), num(9)),
        ),
        # -f(x)
        (
            [t(MINUS), id_("f"), t(LPAREN), id_("x"), t(RPAREN)],
            neg(call(ident("f"), ident("x"))),
        ),
        # f(x)(y)
        (
            [id_("f"), t(LPAREN), id_("x"), t(RPAREN), t(LPAREN), id_("y"), t(RPAREN)],
            call(call(ident("f"), ident("x")), ident("y")),
        ),
        # -f(x)(y)
        (
            [t(MINUS), id_("f"), t(LPAREN), id_("x"), t(RPAREN), t(LPAREN), id_("y"), t(RPAREN)],
            neg(call(call(ident("f"), ident("x")), ident("y"))),
        ),
        # - - - x
        (
            [t(MINUS), t(MINUS), t(MINUS), id_("x")],
            neg(neg(neg(ident("x")))),
        ),
        # -3 * x + 5 / y - 10
        (
            [
                t(MINUS), n(3), t(TIMES), id_("x"), t(PLUS), n(5),
                t(DIVIDE), id_("y"), t(MINUS), n(10),
            ],
            sub(
                add(mul(neg(num(3)), ident("x")), div(num(5), ident("y"))),
                num(10),
            ),
        ),
    ],
)
def test_parse_token_sequences(tokens: list[Token], expected: Expr) -> None:
    assert parse(tokens) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("x", ident("x")),
        ("42", num(42)),
        ("3.5", num(3.5)),
        ("a - b - c", sub(sub(ident("a"), ident("b")), ident("c"))),
        ("a % b * c", mul(mod(ident("a"), ident("b")), ident("c"))),
        ("a + b * c - d", sub(add(ident("a"), mul(ident("b"), ident("c"))), ident("d"))),
        ("a * b + c * d", add(mul(ident("a"), ident("b")), mul(ident("c"), ident("d")))),
        ("a + b * c / d % e", add(ident("a"), mod(div(mul(ident("b"), ident("c")), ident("d")), ident("e")))),
        ("(a + b) * c", mul(add(ident("a"), ident("b")), ident("c"))),
        ("a * (b + c)", mul(ident("a"), add(ident("b"), ident("c")))),
        ("((x))", ident("x")),
        ("f(a + b)", call(ident("f"), add(ident("a"), ident("b")))),
        ("(f)(x)", call(ident("f"), ident("x"))),
        ("(a + b)(c)", call(add(ident("a"), ident("b")), ident("c"))),
        ("2(x)", call(num(2), ident("x"))),
        ("f(g(x))", call(ident("f"), call(ident("g"), ident("x")))),
        ("a - -b", sub(ident("a"), neg(ident("b")))),
        ("-a * -b", mul(neg(ident("a")), neg(ident("b")))),
        ("-(a + b)", neg(add(ident("a"), ident("b")))),
        ("f(x) * g(y)", mul(call(ident("f"), ident("x")), call(ident("g"), ident("y")))),
    ],
)
def test_parse_source(source: str, expected: Expr) -> None:
    assert parse_src(source) == expected


def test_times_binds_tighter_than_plus() -> None:
    tree = parse_src("a + b * c")
    assert isinstance(tree, Binary) and tree.op is BinOp.ADD
    assert isinstance(tree.rhs, Binary) and tree.rhs.op is BinOp.MUL

    tree = parse_src("a * b + c")
    assert isinstance(tree, Binary) and tree.op is BinOp.ADD
    assert isinstance(tree.lhs, Binary) and tree.lhs.op is BinOp.MUL


def test_left_associativity_of_division() -> None:
    tree = parse_src("27 / 3 / 9")
    assert isinstance(tree, Binary) and tree.op is BinOp.DIV
    assert isinstance(tree.lhs, Binary) and tree.lhs.op is BinOp.DIV
    assert tree.rhs == Const(9.0)


def test_mixed_unary_call_and_precedence() -> None:
    tree = parse_src("-3 * x + 5 / y - 10")
    assert isinstance(tree, Binary) and tree.op is BinOp.SUB
    assert isinstance(tree.lhs, Binary) and tree.lhs.op is BinOp.ADD
    assert tree.rhs == num(10)
    product = tree.lhs.lhs
    assert isinstance(product, Binary) and product.op is BinOp.MUL
    assert product.lhs == Negate(Const(3.0))


@pytest.mark.parametrize("additive", ["+", "-"])
@pytest.mark.parametrize("multiplicative", ["*", "/", "%"])
def test_multiplicative_binds_tighter_on_either_side(additive: str, multiplicative: str) -> None:
    right = parse_src(f"a {additive} b {multiplicative} c")
    assert isinstance(right, Binary) and right.op.value == additive
    assert isinstance(right.rhs, Binary) and right.rhs.op.value == multiplicative

    left = parse_src(f"a {multiplicative} b {additive} c")
    assert isinstance(left, Binary) and left.op.value == additive
    assert isinstance(left.lhs, Binary) and left.lhs.op.value == multiplicative


def test_explicit_and_implicit_end_of_input_agree() -> None:
    tokens = [id_("a"), t(PLUS), id_("b")]
    assert parse(tokens) == parse(tokens + [t(EOF)])


def test_accepts_any_sequence() -> None:
    assert parse((id_("a"), t(TIMES), n(2))) == mul(ident("a"), num(2))


def test_parser_does_not_modify_tokens() -> None:
    tokens = tokenize("f(x) + 2 * y")
    snapshot = list(tokens)
    parse(tokens)
    assert tokens == snapshot


def test_cursor_stops_on_end_of_input() -> None:
    tokens = tokenize("a + b")
    parser = Parser(tokens)
    parser.parse()
    # a, +, b consumed; EOF is checked but not consumed
    assert parser.position == 3
    assert parser.current().type == EOF


def test_nodes_remember_source_positions() -> None:
    tree = parse_src("a +\n  f(b)")
    assert isinstance(tree, Binary)
    assert (tree.line, tree.col) == (1, 3)
    assert isinstance(tree.rhs, Call)
    assert (tree.rhs.line, tree.rhs.col) == (2, 4)
    assert (tree.rhs.callee.line, tree.rhs.callee.col) == (2, 3)


def test_parentheses_do_not_make_nodes() -> None:
    assert parse_src("(((a)))") == Ident("a")
    assert parse_src("-((a))") == Negate(Ident("a"))


def test_deep_nesting_hits_the_recursion_limit() -> None:
    depth = 20_000
    tokens = [t(LPAREN)] * depth + [id_("x")] + [t(RPAREN)] * depth
    with pytest.raises(RecursionError):
        parse(tokens)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "tokens,kind,found,position",
    [
        # x y
        ([id_("x"), id_("y")], ParseErrorKind.TRAILING_INPUT, "y", 1),
        # (x
        ([t(LPAREN), id_("x")], ParseErrorKind.MISSING_RPAREN, "", 2),
        # x + *
        ([id_("x"), t(PLUS), t(TIMES)], ParseErrorKind.UNEXPECTED_TOKEN, "*", 2),
        # nothing at all
        ([], ParseErrorKind.UNEXPECTED_TOKEN, "", 0),
        ([t(EOF)], ParseErrorKind.UNEXPECTED_TOKEN, "", 0),
        # )
        ([t(RPAREN)], ParseErrorKind.UNEXPECTED_TOKEN, ")", 0),
        # f(x
        ([id_("f"), t(LPAREN), id_("x")], ParseErrorKind.MISSING_RPAREN, "", 3),
        # f(x y)
        ([id_("f"), t(LPAREN), id_("x"), id_("y"), t(RPAREN)], ParseErrorKind.MISSING_RPAREN, "y", 3),
        # x )
        ([id_("x"), t(RPAREN)], ParseErrorKind.TRAILING_INPUT, ")", 1),
        # -
        ([t(MINUS)], ParseErrorKind.UNEXPECTED_TOKEN, "", 1),
        # ()
        ([t(LPAREN), t(RPAREN)], ParseErrorKind.UNEXPECTED_TOKEN, ")", 1),
        # 3 4
        ([n(3), n(4)], ParseErrorKind.TRAILING_INPUT, "4", 1),
        # * x
        ([t(TIMES), id_("x")], ParseErrorKind.UNEXPECTED_TOKEN, "*", 0),
    ],
)
def test_parse_errors(
    tokens: list[Token], kind: ParseErrorKind, found: str, position: int
) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse(tokens)
    assert excinfo.value.kind is kind
    assert excinfo.value.found == found
    assert excinfo.value.position == position


def test_parse_error_messages() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_src("x + *")
    assert str(excinfo.value) == (
        "expected an identifier, number, or parenthesized expression, not '*'"
    )

    with pytest.raises(ParseError) as excinfo:
        parse_src("(x")
    assert str(excinfo.value) == "expected a right parenthesis, not end of input"

    with pytest.raises(ParseError) as excinfo:
        parse_src("x y")
    assert str(excinfo.value).startswith("expected end of input")
    assert str(excinfo.value).endswith("not 'y'")


def test_parse_error_is_a_syntax_error_with_location() -> None:
    with pytest.raises(SyntaxError) as excinfo:
        parse_src("a +\n  )")
    assert isinstance(excinfo.value, ParseError)
    assert excinfo.value.lineno == 2
    assert excinfo.value.offset == 3
    assert excinfo.value.token == Token.of(RPAREN, 2, 3)


def test_number_token_renders_in_errors() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse([n(1), n(2.5)])
    assert excinfo.value.found == "2.5"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

names = st.sampled_from(["a", "b", "x", "y", "f", "g", "total_2"])
numbers = st.floats(min_value=0, max_value=1e12, allow_nan=False, allow_infinity=False).map(abs)
operators = st.sampled_from(["+", "-", "*", "/", "%"])


@composite
def primary_source(draw: st.DrawFn, depth: int, with_names: bool) -> str:
    choices = ["number"]
    if with_names:
        choices.append("name")
    if depth < 2:
        choices.append("group")
    kind = draw(st.sampled_from(choices))
    if kind == "number":
        return format_number(draw(numbers))
    if kind == "name":
        return draw(names)
    return "(" + draw(expression_source(depth + 1, with_names)) + ")"


@composite
def term_source(draw: st.DrawFn, depth: int, with_names: bool) -> str:
    text = "-" * draw(st.integers(0, 3)) + draw(primary_source(depth, with_names))
    if with_names and depth < 2:
        for _ in range(draw(st.integers(0, 1))):
            text += "(" + draw(expression_source(depth + 1, with_names)) + ")"
    return text


@composite
def expression_source(draw: st.DrawFn, depth: int = 0, with_names: bool = True) -> str:
    parts = [draw(term_source(depth, with_names))]
    for _ in range(draw(st.integers(0, 3))):
        parts.append(draw(operators))
        parts.append(draw(term_source(depth, with_names)))
    return " ".join(parts)


@given(expression_source())
def test_generated_expressions_parse(source: str) -> None:
    parse_src(source)


@given(expression_source())
def test_extra_grouping_is_idempotent(source: str) -> None:
    assert parse_src(f"({source})") == parse_src(source)


@given(expression_source(with_names=False))
def test_rendered_constant_expressions_evaluate_identically(source: str) -> None:
    tree = parse_src(source)
    reparsed = parse_src(render(tree))
    evaluator = Evaluator()
    assert same_value(evaluator.evaluate(tree), evaluator.evaluate(reparsed))


@given(expression_source())
def test_rendering_reproduces_the_tree(source: str) -> None:
    tree = parse_src(source)
    assert parse_src(render(tree)) == tree


@given(st.lists(st.sampled_from([PLUS, MINUS, TIMES, DIVIDE, MODULO]), min_size=1, max_size=8))
def test_single_level_chains_fold_left(kinds: list[str]) -> None:
    # only keep a run of operators sharing one level
    level = precedence_of(t(kinds[0]))
    kinds = [k for k in kinds if precedence_of(t(k)) == level]
    tokens = [id_("v0")]
    for i, kind in enumerate(kinds, start=1):
        tokens += [t(kind), id_(f"v{i}")]

    expected: Expr = ident("v0")
    for i, kind in enumerate(kinds, start=1):
        expected = bin_(expected, binop_of(t(kind)), ident(f"v{i}"))
    assert parse(tokens) == expected


@given(st.integers(min_value=1, max_value=50))
def test_unary_runs_nest_to_the_right(count: int) -> None:
    tree = parse([t(MINUS)] * count + [id_("x")])
    for _ in range(count):
        assert isinstance(tree, Negate)
        tree = tree.operand
    assert tree == Ident("x")


@given(st.integers(min_value=1, max_value=30))
def test_call_chains_nest_to_the_left(count: int) -> None:
    tokens = [id_("f")]
    for i in range(count):
        tokens += [t(LPAREN), n(i), t(RPAREN)]
    tree = parse(tokens)
    for i in reversed(range(count)):
        assert isinstance(tree, Call)
        assert tree.arg == Const(float(i))
        tree = tree.callee
    assert tree == Ident("f")


@given(st.lists(st.sampled_from([IDENT, NUMLIT, LPAREN, RPAREN, PLUS, MINUS, TIMES]), max_size=12))
def test_arbitrary_token_soup_parses_or_raises_parse_error(kinds: list[str]) -> None:
    tokens = [id_("x") if k == IDENT else n(1) if k == NUMLIT else t(k) for k in kinds]
    try:
        tree = parse(tokens)
    except ParseError as e:
        assert isinstance(e.kind, ParseErrorKind)
    else:
        assert isinstance(tree, (Const, Ident, Negate, Binary, Call))
