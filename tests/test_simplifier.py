import pytest

from symbolic_cas.config import SimplifierConfig
from symbolic_cas.errors import ResourceExceededError
from symbolic_cas.expression_tree.core.node import (
    integer_node, fraction_node, variable_node
)
from symbolic_cas.expression_tree.parsing import parse_string
from symbolic_cas.simplification.simplifier import Simplifier


def simplified(text, **options):
    return Simplifier(SimplifierConfig(**options)).simplify(parse_string(text))


def test_like_terms_combine():
    assert simplified("(2*x) + (3*x)") == simplified("5*x")
    assert simplified("(2*x) + (3*x)").to_string() == "5*x"


def test_square_root_of_eight():
    result = simplified("8^(1/2)")
    assert result == Simplifier().format_tree(parse_string("2*2^(1/2)"))


@pytest.mark.parametrize("text,expected", [
    ("x - x", "0"),
    ("x*x", "x^2"),
    ("x/x", "1"),
    ("2*x*3", "6*x"),
    ("x + 2*x + y", "3*x + y"),
    ("x^2*x^3", "x^5"),
    ("(x^2)^3", "x^6"),
    ("0*x + 1", "1"),
    ("1*x", "x"),
    ("x^1", "x"),
    ("x^0", "1"),
    ("1^x", "1"),
    ("(2*x*y)^2", "4*x^2*y^2"),
    ("6/4", "3/2"),
    ("2 + 3 - 1", "4"),
    ("72^(1/2)", "6*2^(1/2)"),
    ("(1/4)^(1/2)", "1/2"),
    ("(x*y)/(y*x)", "1"),
])
def test_automatic_simplification(text, expected):
    assert simplified(text) == simplified(expected)


@pytest.mark.parametrize("text", [
    "0/0",
    "x + 1/0",
    "0^0",
    "0^(-2)",
    "2*x^2 + (3/0)*y",
])
def test_undefined_propagates(text):
    assert simplified(text).is_undefined()


def test_non_integer_nested_power_is_kept():
    result = simplified("(x^2)^(1/2)")
    assert result.is_power()
    assert result.children[0] == simplified("x^2")


def test_root_chains_collapse():
    assert simplified("(2^(1/2))^(1/2)") == simplified("2^(1/4)")


def test_simplification_is_idempotent():
    simplifier = Simplifier()
    for text in ["x + 2*x + y*x", "(x+1)^2*(x+1)", "sin(x)^2 + 3*sin(x)^2", "8^(1/2)*x/4", "a*b - b*a + c"]:
        once = simplifier.simplify(parse_string(text))
        twice = simplifier.automatic_simplify(once)
        assert twice == once


def test_canonical_order_is_deterministic():
    assert simplified("y + x + 2").to_string() == simplified("2 + x + y").to_string()
    assert simplified("b*a*3").to_string() == simplified("3*a*b").to_string()


def test_automatic_simplify_leaves_input_untouched():
    simplifier = Simplifier()
    tree = simplifier.format_tree(parse_string("x + x"))
    before = tree.copy()
    simplifier.automatic_simplify(tree)
    assert tree == before
    assert tree.is_sum()


def test_format_tree_converts_division_and_literals():
    simplifier = Simplifier()
    tree = simplifier.format_tree(parse_string("3/4"))
    assert tree == fraction_node(3, 4)
    assert tree.kind() == 'Frac'
    tree = simplifier.format_tree(parse_string("x/y"))
    assert tree == parse_string("x*y^-1")
    tree = simplifier.format_tree(parse_string("2.0 + 1.5"))
    assert tree.children[0].is_integer()
    assert tree.children[1].is_decimal()


def test_format_tree_flattens():
    tree = Simplifier().format_tree(parse_string("a + (b + c) + d"))
    assert tree.num_operands() == 4


def test_decimal_to_rational_option():
    result = simplified("0.5*x + 0.25", decimal_to_rational=True)
    assert result == simplified("1/2*x + 1/4")


def test_decimal_arithmetic_stays_float():
    result = simplified("0.5 + 0.25")
    assert result.is_decimal()
    assert result.value == pytest.approx(0.75)


def test_expand_binomial():
    simplifier = Simplifier()
    result = simplifier.expand(simplifier.format_tree(parse_string("(x + 1)^2")))
    assert result == simplified("x^2 + 2*x + 1")


def test_expand_product_of_sums():
    simplifier = Simplifier()
    result = simplifier.expand(simplifier.format_tree(parse_string("(x + 1)*(x - 1)")))
    assert result == simplified("x^2 - 1")
    result = simplifier.expand(simplifier.format_tree(parse_string("(a + b)^3")))
    assert result == simplified("a^3 + 3*a^2*b + 3*a*b^2 + b^3")


def test_expand_respects_exponent_limit():
    simplifier = Simplifier()
    with pytest.raises(ResourceExceededError):
        simplifier.expand(simplifier.format_tree(parse_string("(x + y)^2000")))


def test_expand_respects_node_limit():
    simplifier = Simplifier(SimplifierConfig(max_nodes=50))
    with pytest.raises(ResourceExceededError):
        simplifier.expand(simplifier.format_tree(parse_string("(x + y + z)^10")))


def test_huge_integer_power_is_refused():
    with pytest.raises(ResourceExceededError):
        simplified("2^5000")


def test_depth_limit():
    with pytest.raises(ResourceExceededError):
        simplified("((((((x+1)+1)+1)+1)+1)+1)", max_depth=4)


def test_post_format_negative_powers():
    simplifier = Simplifier()
    tree = simplifier.simplify(parse_string("2/x"))
    simplifier.post_format_tree(tree)
    assert tree.to_string() == "2/x"
    tree = simplifier.simplify(parse_string("1/x"))
    assert simplifier.post_format_tree(tree).to_string() == "1/x"


def test_post_format_roots():
    simplifier = Simplifier()
    tree = simplifier.simplify(parse_string("x^(1/2)"))
    assert simplifier.post_format_tree(tree).to_string() == "nroot(x, 2)"
    tree = simplifier.simplify(parse_string("x^(-1/3)"))
    assert simplifier.post_format_tree(tree).to_string() == "1/nroot(x, 3)"


def test_functions_are_kept_without_evaluation():
    result = simplified("sin(0) + ln(1)")
    assert result.is_sum()


@pytest.mark.parametrize("text,expected", [
    ("sin(0)", integer_node(0)),
    ("cos(0)", integer_node(1)),
    ("ln(1)", integer_node(0)),
    ("exp(0)", integer_node(1)),
    ("abs(-3/4)", fraction_node(3, 4)),
    ("floor(7/2)", integer_node(3)),
    ("max(1, 4, 2)", integer_node(4)),
    ("gcd(12, 18)", integer_node(6)),
    ("lcm(4, 6)", integer_node(12)),
    ("mod(7, 3)", integer_node(1)),
    ("log(10, 100)", integer_node(2)),
])
def test_function_folding(text, expected):
    assert simplified(text, evaluate_functions=True) == expected


def test_sqrt_folds_exactly():
    assert simplified("sqrt(8)", evaluate_functions=True) == simplified("2*2^(1/2)")
    assert simplified("nthroot(-8, 3)", evaluate_functions=True) == integer_node(-2)
    assert simplified("sqrt(-4)", evaluate_functions=True).is_undefined()


def test_logarithm_domain():
    assert simplified("ln(0)", evaluate_functions=True).is_undefined()
    assert simplified("log(-5)", evaluate_functions=True).is_undefined()


@pytest.mark.parametrize("text,expected", [
    ("sin(30)", "1/2"),
    ("cos(60)", "1/2"),
    ("sin(45)", "2^(1/2)/2"),
    ("cos(30)", "3^(1/2)/2"),
    ("tan(45)", "1"),
    ("sin(210)", "-1/2"),
    ("cos(180)", "-1"),
    ("tan(60)", "3^(1/2)"),
    ("cot(45)", "1"),
    ("sec(60)", "2"),
])
def test_trig_table_in_degrees(text, expected):
    assert simplified(text, evaluate_functions=True, use_radians=False) == simplified(expected)


def test_trig_poles_are_undefined():
    assert simplified("tan(90)", evaluate_functions=True, use_radians=False).is_undefined()
    assert simplified("csc(0)", evaluate_functions=True, use_radians=False).is_undefined()


def test_trig_off_table_falls_back_to_float():
    result = simplified("sin(1)", evaluate_functions=True)
    assert result.is_decimal()
    assert result.value == pytest.approx(0.8414709848)


def test_inverse_trig_in_degrees():
    result = simplified("asin(1)", evaluate_functions=True, use_radians=False)
    assert result == integer_node(90)


def test_symbolic_arguments_block_folding():
    result = simplified("sin(x)", evaluate_functions=True)
    assert result.is_function('sin')
    assert result.children[0] == variable_node('x')


def test_simplify_rational_helpers():
    simplifier = Simplifier()
    assert simplifier.simplify_rational_number(fraction_node(6, -8)) == fraction_node(-3, 4)
    tree = simplifier.format_tree(parse_string("(1/2)^2 + 3/4"))
    assert simplifier.simplify_rne(tree) == integer_node(1)


def test_decimal_powers():
    result = simplified("2.5^2")
    assert result.value == pytest.approx(6.25)
    assert simplified("x^0.5").is_power()
    assert simplified("4^0.5") == integer_node(2)
