import math
import unittest

from minilox.engine import LoxEngine
from minilox.errors import StepLimitExceeded
from minilox.runtime import LoxClass, LoxInstance, is_equal, is_truthy, stringify


def run(source, **kwargs):
	return LoxEngine(**kwargs).run(source)


class ValueSemanticsTestCase(unittest.TestCase):

	def test_truthiness(self):
		self.assertFalse(is_truthy(None))
		self.assertFalse(is_truthy(False))
		for value in (True, 0.0, "", "text"):
			self.assertTrue(is_truthy(value))

	def test_equality(self):
		self.assertTrue(is_equal(None, None))
		self.assertTrue(is_equal(1.0, 1.0))
		self.assertTrue(is_equal("a", "a"))
		self.assertFalse(is_equal(True, 1.0))
		self.assertFalse(is_equal(0.0, False))
		self.assertFalse(is_equal(None, False))
		self.assertFalse(is_equal(math.nan, math.nan))

	def test_stringify(self):
		self.assertEqual(stringify(None), "nil")
		self.assertEqual(stringify(True), "true")
		self.assertEqual(stringify(3.0), "3")
		self.assertEqual(stringify(-0.5), "-0.5")
		self.assertEqual(stringify("plain"), "plain")
		klass = LoxClass("Box", None, {})
		self.assertEqual(stringify(klass), "Box")
		self.assertEqual(stringify(LoxInstance(klass)), "Box instance")

	def test_stringify_large_numbers_use_exponent_form(self):
		self.assertEqual(stringify(1e16), "1e+16")
		self.assertEqual(stringify(123456789.0), "123456789")


class EvaluateTestCase(unittest.TestCase):

	def test_arithmetic(self):
		engine = LoxEngine()
		self.assertEqual(engine.evaluate("2 - 1").value, "1")
		self.assertEqual(engine.evaluate("1 + 1").value, "2")
		self.assertEqual(engine.evaluate("10 / 4").value, "2.5")
		self.assertEqual(engine.evaluate('"foo" + "bar"').value, "foobar")

	def test_division_by_zero_follows_ieee(self):
		engine = LoxEngine()
		self.assertEqual(engine.evaluate("1 / 0").value, "inf")
		self.assertEqual(engine.evaluate("0 / 0 == 0 / 0").value, "false")

	def test_evaluation_sees_earlier_declarations(self):
		engine = LoxEngine()
		engine.run("var base = 40;")
		self.assertEqual(engine.evaluate("base + 2").value, "42")

	def test_runtime_error(self):
		result = LoxEngine().evaluate('"a" - 1')
		self.assertIsNone(result.value)
		self.assertEqual(result.runtime_error.message, "Operands must be numbers.")

	def test_syntax_error(self):
		result = LoxEngine().evaluate("1 +")
		self.assertIsNone(result.value)
		self.assertEqual([d.message for d in result.diagnostics], ["Expect expression."])


class RunTestCase(unittest.TestCase):

	def test_closure_captures_declaration_scope(self):
		source = """
		var a = "outer";
		{
			fun show() { print a; }
			show();
			var a = "inner";
			show();
		}
		"""
		self.assertEqual(run(source).output, ["outer", "outer"])

	def test_super_dispatch(self):
		source = """
		class A { method() { print "A"; } }
		class B < A { method() { super.method(); print "B"; } }
		B().method();
		"""
		result = run(source)
		self.assertTrue(result.ok)
		self.assertEqual(result.output, ["A", "B"])

	def test_inherited_method_sees_subclass_instance(self):
		source = """
		class Animal { speak() { return this.sound; } }
		class Dog < Animal { init() { this.sound = "woof"; } }
		print Dog().speak();
		"""
		self.assertEqual(run(source).output, ["woof"])

	def test_bound_method_keeps_its_instance(self):
		source = """
		class Box {
			init(v) { this.v = v; }
			get() { return this.v; }
		}
		var a = Box(1);
		var b = Box(2);
		var getter = a.get;
		b.get = getter;
		print b.get();
		a.v = 3;
		print getter();
		"""
		self.assertEqual(run(source).output, ["1", "3"])

	def test_duplicate_local_is_a_static_error(self):
		result = run("{ var a = 1; var a = 2; print a; }")
		self.assertFalse(result.ok)
		self.assertEqual(result.output, [])
		self.assertEqual(result.diagnostics[0].message, "Already a variable with this name in this scope.")

	def test_duplicate_global_is_fine(self):
		result = run("var a = 1; var a = 2; print a;")
		self.assertTrue(result.ok)
		self.assertEqual(result.output, ["2"])

	def test_arity_mismatch(self):
		result = run("fun f(a) {}\nf(1, 2);")
		self.assertEqual(result.runtime_error.message, "'f' expected 1 arguments but got 2.")
		self.assertEqual(result.runtime_error.line, 2)

	def test_class_arity_follows_init(self):
		result = run("class P { init(x, y) {} }\nP(1);")
		self.assertEqual(result.runtime_error.message, "'P' expected 2 arguments but got 1.")
		self.assertTrue(run("class Q {} print Q();").ok)

	def test_runtime_error_stops_execution(self):
		result = run('print 1;\nprint nil + 1;\nprint 2;')
		self.assertEqual(result.output, ["1"])
		self.assertEqual(result.runtime_error.line, 2)

	def test_globals_persist_between_runs(self):
		engine = LoxEngine()
		engine.run("var count = 1; fun bump() { count = count + 1; }")
		engine.run("bump();")
		self.assertEqual(engine.run("print count;").output, ["2"])

	def test_printer_receives_output(self):
		lines = []
		result = LoxEngine(printer=lines.append).run('print "hi"; print 2;')
		self.assertEqual(lines, ["hi", "2"])
		self.assertEqual(result.output, lines)

	def test_step_limit(self):
		result = run("while (true) {}", max_steps=100)
		self.assertIsInstance(result.runtime_error, StepLimitExceeded)
		self.assertIsNone(result.runtime_error.line)
		self.assertGreater(result.steps, 100)

	def test_unbounded_recursion(self):
		result = run("fun down() { down(); }\ndown();")
		self.assertEqual(result.runtime_error.message, "Stack overflow.")

	def test_deep_recursion_within_limit(self):
		source = "fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); }\nprint count(300);"
		self.assertEqual(run(source).output, ["300"])

	def test_super_in_class_without_superclass(self):
		result = run("class Lone { m() { return super.m(); } }\nLone().m();")
		self.assertEqual(result.runtime_error.message, "Can't use 'super' in a class with no superclass.")
		self.assertEqual(result.runtime_error.line, 1)

	def test_nested_class_does_not_see_outer_super(self):
		source = """
		class A { x() { return "A.x"; } }
		class B < A {
			m() {
				class C { n() { return super.x(); } }
				return C().n();
			}
		}
		print B().m();
		"""
		result = run(source)
		self.assertEqual(result.output, [])
		self.assertEqual(result.runtime_error.message, "Can't use 'super' in a class with no superclass.")

	def test_deep_nesting_is_a_static_error(self):
		result = run("print " + "(" * 5000 + "1" + ")" * 5000 + ";")
		self.assertFalse(result.ok)
		self.assertIsNone(result.runtime_error)
		self.assertEqual([d.message for d in result.diagnostics], ["Too much nesting."])

	def test_deep_nesting_in_a_standalone_expression(self):
		result = LoxEngine().evaluate("-" * 20000 + "1")
		self.assertIsNone(result.value)
		self.assertEqual([d.message for d in result.diagnostics], ["Too much nesting."])

	def test_native_functions(self):
		result = run('print clock() > 0; print toString(1) + toString(nil);')
		self.assertEqual(result.output, ["true", "1nil"])

	def test_compile_reports_stages(self):
		artifacts = LoxEngine().compile("var a = @;")
		self.assertEqual([d.stage.name for d in artifacts.diagnostics], ["LEXICAL", "SYNTAX"])
		self.assertGreaterEqual(artifacts.duration_ms, 0)


if __name__ == '__main__':
	unittest.main()
