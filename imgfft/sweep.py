"""
Benchmark sweep over increasing transform sizes.
"""

import logging

import numpy

from .benchmark import TIMED_LAUNCHES, WARMUP_LAUNCHES, runBenchmark
from .cl import Images, InsufficientLocalMemory
from .kernel_helpers import checkSize
from .plan import plan
from .verify import DEVICE_TOLERANCE, verifyOutput, verifyReferenceConsistency

logger = logging.getLogger(__name__)


class SweepConfig:

	def __init__(self, start=8, max_size=10000000, seed=0, verify=True,
			tolerance=DEVICE_TOLERANCE, warmup=WARMUP_LAUNCHES, trials=TIMED_LAUNCHES,
			stop_on_insufficient_memory=True):
		checkSize(start)
		self.start = start
		self.max_size = max_size
		self.seed = seed
		self.verify = verify
		self.tolerance = tolerance
		self.warmup = warmup
		self.trials = trials
		# device limit for one size is assumed to be the limit for all bigger ones
		self.stop_on_insufficient_memory = stop_on_insufficient_memory

	def sizes(self):
		n = self.start
		while n < self.max_size:
			yield n
			n *= 2


def makeInput(random_state, n):
	return random_state.uniform(0.0, 1.0, n).astype(numpy.float32)

def planKernel(context, template, n):
	return plan(n, lambda params: context.workgroupLimit(template.render(params)))

def runSize(context, template, data, config):
	"""Plans, benchmarks and optionally verifies the transform of one input vector"""
	n = data.size
	checkSize(n)
	Images.checkCapacity(context, n)

	if config.verify:
		verifyReferenceConsistency(data)

	dispatch = planKernel(context, template, n)
	params = dispatch.params
	print("workgroup max size: " + str(dispatch.max_workgroup_size) + " for " +
		str(params.n_local_butterflies) + " butterfly per thread")
	print("run kernels using global size : " + str(params.global_size))

	with context.kernel(template.render(params)) as func:
		with Images(context, data) as images:
			result = runBenchmark(context, func, params, images,
				warmup=config.warmup, trials=config.trials)
			print("avg kernel duration (us) : " + str(result.average_us))
			output = images.read()

	if config.verify:
		verifyOutput(data, output, tolerance=config.tolerance)
		result.verified = True
		print("verification ok")

	return result

def sweep(context, template, config=None):
	"""
	Runs the benchmark for sizes start, 2 * start, ... below config.max_size.
	Returns results of completed sizes.
	"""
	if config is None:
		config = SweepConfig()

	random_state = numpy.random.RandomState(config.seed)
	results = []

	for n in config.sizes():
		print("")
		print("* input size: " + str(n))
		data = makeInput(random_state, n)

		try:
			results.append(runSize(context, template, data, config))
		except InsufficientLocalMemory as e:
			print(str(e))
			if config.stop_on_insufficient_memory:
				break
			logger.info("skipping size %d", n)

	context.finish()
	return results
