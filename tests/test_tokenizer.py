import pytest

from symbolic_cas.errors import ExpressionSyntaxError
from symbolic_cas.expression_tree.core.tokens import TokenKind
from symbolic_cas.expression_tree.parsing import tokenize


def token_strings(text):
    return [str(t) for t in tokenize(text).tokens]


def test_binary_operators_in_order():
    assert token_strings("5 - 2 + 3") == [
        'Number(5)', 'Operator(-)', 'Number(2)', 'Operator(+)', 'Number(3)'
    ]


def test_decimal_literal():
    tokens = tokenize("3.25").tokens
    assert len(tokens) == 1
    assert tokens[0].kind == TokenKind.NUMBER
    assert tokens[0].value == pytest.approx(3.25)


def test_implicit_multiplication_number_letter():
    assert token_strings("2x") == ['Number(2)', 'Operator(*)', 'Variable(x)']


def test_implicit_multiplication_between_variables():
    result = tokenize("xy")
    assert [str(t) for t in result.tokens] == ['Variable(x)', 'Operator(*)', 'Variable(y)']
    assert result.symbols == {'x', 'y'}


def test_implicit_multiplication_between_parentheses():
    strings = token_strings("(x+1)(x-1)")
    assert strings[4:7] == ['RightParenthesis', 'Operator(*)', 'LeftParenthesis']


def test_implicit_multiplication_before_function():
    assert token_strings("3sin(x)")[:3] == ['Number(3)', 'Operator(*)', 'Function(sin, 1)']


def test_function_arity_from_separators():
    tokens = tokenize("log(2, x)").tokens
    assert str(tokens[0]) == 'Function(log, 2)'
    assert str(tokens[3]) == 'ArgumentSeparator'


def test_nested_function_arity():
    strings = token_strings("max(1, min(2, 3, 4))")
    assert strings[0] == 'Function(max, 2)'
    assert 'Function(min, 3)' in strings


def test_leading_minus_is_multiplication_by_minus_one():
    assert token_strings("-x") == ['Number(-1)', 'Operator(*)', 'Variable(x)']


def test_minus_after_open_paren():
    assert token_strings("(-2)") == [
        'LeftParenthesis', 'Number(-1)', 'Operator(*)', 'Number(2)', 'RightParenthesis'
    ]


def test_negative_exponent_literal():
    assert token_strings("x^-2") == ['Variable(x)', 'Operator(^)', 'Number(-2)']


@pytest.mark.parametrize("text,expected", [
    ("x^-2 + 1", ['Variable(x)', 'Operator(^)', 'Number(-2)', 'Operator(+)', 'Number(1)']),
    ("(x^-2)", ['LeftParenthesis', 'Variable(x)', 'Operator(^)', 'Number(-2)', 'RightParenthesis']),
    ("x^-2*y", ['Variable(x)', 'Operator(^)', 'Number(-2)', 'Operator(*)', 'Variable(y)']),
    ("x^-1.5y", ['Variable(x)', 'Operator(^)', 'Number(-1.5)', 'Operator(*)', 'Variable(y)']),
])
def test_negative_exponent_literal_followed_by_more_input(text, expected):
    assert token_strings(text) == expected


def test_negative_exponent_needs_a_literal():
    with pytest.raises(ExpressionSyntaxError):
        tokenize("x^-y")


def test_unary_plus_is_ignored():
    assert token_strings("+x") == ['Variable(x)']


def test_symbols_exclude_function_names():
    assert tokenize("sin(x) + a").symbols == {'x', 'a'}


@pytest.mark.parametrize("text", [
    "2 $ 3",
    "(x + 1",
    "x + 1)",
    "()",
    "sin()",
    "f(x,)",
    "1..2",
    "x^-y",
    "*x",
    "x, y",
])
def test_syntax_errors(text):
    with pytest.raises(ExpressionSyntaxError):
        tokenize(text)


def test_syntax_error_is_builtin_syntax_error():
    with pytest.raises(SyntaxError) as info:
        tokenize("2 # 3")
    assert "'#'" in str(info.value)
    assert info.value.position == 2
