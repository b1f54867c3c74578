import logging
import optparse
import sys

from .cl import Context, deviceByIndex, firstDevice
from .kernel import CompilerOptions, loadTemplate
from .sweep import SweepConfig, sweep


def createParser():
	parser = optparse.OptionParser(usage="python -m imgfft [options]")

	parser.add_option("--start", action="store", type="int", dest="start", default=8,
		help="first transform size")
	parser.add_option("--max", action="store", type="int", dest="max_size", default=10000000,
		help="sizes are doubled while smaller than this bound")
	parser.add_option("--seed", action="store", type="int", dest="seed", default=0,
		help="random seed for input data")
	parser.add_option("--trials", action="store", type="int", dest="trials", default=3000,
		help="number of timed launches")
	parser.add_option("--warmup", action="store", type="int", dest="warmup", default=5,
		help="number of launches discarded before timing")
	parser.add_option("--no-verify", action="store_false", dest="verify", default=True,
		help="do not compare results with the reference transform")
	parser.add_option("--skip-oversized", action="store_false", dest="stop_on_insufficient_memory",
		default=True, help="skip sizes not fitting in local memory instead of stopping")

	parser.add_option("--kernel", action="store", dest="kernel", default=None,
		help="kernel template file; .mako files are rendered with mako, others only get placeholders replaced")
	parser.add_option("-I", action="append", dest="include_dirs", default=[],
		help="additional include directory for the kernel compiler")
	parser.add_option("--no-fast-math", action="store_false", dest="fast_relaxed_math",
		default=True, help="do not pass -cl-fast-relaxed-math")
	parser.add_option("--no-denorms-are-zero", action="store_false", dest="denorms_are_zero",
		default=True, help="do not pass -cl-denorms-are-zero")
	parser.add_option("--compiler-output", action="store_true", dest="compiler_output",
		default=False, help="show OpenCL compiler warnings")

	parser.add_option("--device", action="store", dest="device", default=None,
		help="platform and device indices, as P:D (default: first available)")
	parser.add_option("-v", "--verbose", action="store_true", dest="verbose", default=False,
		help="print diagnostic messages")

	return parser

def parseDevice(parser, value):
	if value is None:
		return firstDevice
	try:
		platform_index, device_index = [int(x) for x in value.split(":")]
	except ValueError:
		parser.error("device must be given as P:D, got " + value)
	return deviceByIndex(platform_index, device_index)

def main(argv=None):
	parser = createParser()
	opts, args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.WARNING,
		format="%(name)s: %(message)s")

	try:
		config = SweepConfig(start=opts.start, max_size=opts.max_size, seed=opts.seed,
			verify=opts.verify, warmup=opts.warmup, trials=opts.trials,
			stop_on_insufficient_memory=opts.stop_on_insufficient_memory)
	except ValueError as e:
		parser.error(str(e))

	compiler_options = CompilerOptions(denorms_are_zero=opts.denorms_are_zero,
		fast_relaxed_math=opts.fast_relaxed_math, include_dirs=opts.include_dirs)

	template = loadTemplate(opts.kernel)
	context = Context(select_device=parseDevice(parser, opts.device),
		compiler_options=compiler_options, compiler_output=opts.compiler_output)
	print("device: " + context.name)

	sweep(context, template, config)
	return 0


if __name__ == "__main__":
	sys.exit(main())
