import optparse
import sys
import unittest

from helpers import isCLAvailable


def createSuite(modes):
	loader = unittest.TestLoader()
	modules = []
	if 'func' in modes:
		modules.extend(['test_kernel', 'test_plan', 'test_benchmark', 'test_reference',
			'test_emulation', 'test_verify', 'test_images', 'test_sweep'])
	if 'device' in modes:
		modules.append('test_device')
	return loader.loadTestsFromNames(modules)

def main():
	parser = optparse.OptionParser(usage="test_all.py [mode] [options]\n" +
		"Modes: func, device (default: all available)")
	parser.add_option("-v", "--verbose", action="store_true", dest="verbose", default=False,
		help="print test names")

	opts, args = parser.parse_args()

	modes = ['func', 'device']
	if len(args) == 0:
		to_run = modes if isCLAvailable() else ['func']
	elif args[0] not in modes:
		parser.print_help()
		return 1
	else:
		to_run = [args[0]]

	suite = createSuite(to_run)
	result = unittest.TextTestRunner(verbosity=2 if opts.verbose else 1).run(suite)
	return 0 if result.wasSuccessful() else 1


if __name__ == "__main__":
	sys.exit(main())
