import unittest

from fastapi.testclient import TestClient

from webapp.main import app


class WebAppTestCase(unittest.TestCase):

	def setUp(self):
		self.client = TestClient(app)

	def test_health(self):
		response = self.client.get("/health")
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json(), {"status": "ok"})

	def test_index(self):
		response = self.client.get("/")
		self.assertEqual(response.status_code, 200)
		self.assertIn("minilox", response.text)

	def test_compile(self):
		response = self.client.post("/api/compile", json={"source": "var a = 1;"})
		self.assertEqual(response.status_code, 200)
		data = response.json()
		self.assertEqual(data["diagnostic_count"], 0)
		self.assertEqual([t["kind"] for t in data["tokens"]], ["VAR", "IDENT", "ASSIGN", "NUMBER", "SEMI"])
		self.assertEqual(data["ast"][0]["_type"], "VarStatement")
		self.assertEqual(data["ast"][0]["name"]["lexeme"], "a")

	def test_compile_reports_diagnostics(self):
		data = self.client.post("/api/compile", json={"source": "print ;"}).json()
		self.assertEqual(data["diagnostic_count"], 1)
		diagnostic = data["diagnostics"][0]
		self.assertEqual(diagnostic["stage"], "SYNTAX")
		self.assertEqual(diagnostic["text"], "[line 1] Error at ';': Expect expression.")

	def test_run(self):
		data = self.client.post("/api/run", json={"source": 'print "a"; print 1 + 1;'}).json()
		self.assertTrue(data["run"]["executed"])
		self.assertEqual(data["run"]["output"], ["a", "2"])
		self.assertIsNone(data["run"]["runtime_error"])

	def test_run_runtime_error(self):
		data = self.client.post("/api/run", json={"source": "print 1;\nnil();"}).json()
		self.assertEqual(data["run"]["output"], ["1"])
		self.assertEqual(data["run"]["runtime_error"], {"message": "Can only call functions and classes.", "line": 2})

	def test_run_skips_execution_on_static_errors(self):
		data = self.client.post("/api/run", json={"source": "{ var a; var a; }"}).json()
		self.assertFalse(data["run"]["executed"])
		self.assertEqual(data["diagnostics"][0]["stage"], "RESOLUTION")

	def test_run_step_limit(self):
		data = self.client.post("/api/run", json={"source": "while (true) {}", "max_steps": 50}).json()
		self.assertIn("Step limit of 50 exceeded", data["run"]["runtime_error"]["message"])
		self.assertIsNone(data["run"]["runtime_error"]["line"])

	def test_run_deep_nesting(self):
		source = "print " + "(" * 5000 + "1" + ")" * 5000 + ";"
		response = self.client.post("/api/run", json={"source": source})
		self.assertEqual(response.status_code, 200)
		data = response.json()
		self.assertFalse(data["run"]["executed"])
		self.assertEqual([d["message"] for d in data["diagnostics"]], ["Too much nesting."])

	def test_invalid_step_limit(self):
		response = self.client.post("/api/run", json={"source": "", "max_steps": 0})
		self.assertEqual(response.status_code, 422)


if __name__ == '__main__':
	unittest.main()
