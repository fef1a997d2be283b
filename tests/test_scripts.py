import unittest

from tests.scriptcase import SCRIPTS_DIR, check_script


class ScriptsTestCase(unittest.TestCase):

	def test_scripts(self):
		paths = sorted(SCRIPTS_DIR.glob("*.lox"))
		self.assertTrue(paths)
		for path in paths:
			with self.subTest(script=path.name):
				check_script(path)


if __name__ == '__main__':
	unittest.main()
