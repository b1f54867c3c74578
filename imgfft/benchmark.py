import logging

logger = logging.getLogger(__name__)

WARMUP_LAUNCHES = 5
TIMED_LAUNCHES = 3000


class BenchmarkResult:

	def __init__(self, n, workgroup_size, multiplicity, average_us, trials):
		self.n = n
		self.workgroup_size = workgroup_size
		self.multiplicity = multiplicity
		self.average_us = average_us
		self.trials = trials
		self.verified = None

	def __repr__(self):
		return "BenchmarkResult(n=" + str(self.n) + ", workgroup_size=" + str(self.workgroup_size) + \
			", average_us=" + str(self.average_us) + ")"


def averageMicroseconds(samples, skip=WARMUP_LAUNCHES):
	"""
	Trimmed mean of kernel durations.
	``samples`` is a sequence of (start_ns, end_ns) pairs; the first ``skip``
	of them are warm-up launches and are ignored. The average is truncated
	to whole nanoseconds first, then to whole microseconds.
	"""
	timed = samples[skip:]
	if len(timed) == 0:
		raise ValueError("No timed samples: got " + str(len(samples)) + ", skipping " + str(skip))

	elapsed = 0
	for start, end in timed:
		elapsed += end - start

	return int(elapsed / float(len(timed))) // 1000

def collectTimings(launch, launches):
	"""
	Calls ``launch()`` the given number of times; each call must return
	a profiling-enabled event. Launches are not pipelined: every event is
	waited for before the next launch.
	"""
	samples = []
	for i in range(launches):
		event = launch()
		event.wait()
		samples.append((event.profile.start, event.profile.end))
	return samples

def runBenchmark(context, func, params, images, warmup=WARMUP_LAUNCHES, trials=TIMED_LAUNCHES):
	queue = context.getQueue()
	logger.debug("running %d + %d launches, global size %d", warmup, trials, params.global_size)

	samples = collectTimings(lambda: func(queue, params, images), warmup + trials)
	return BenchmarkResult(params.n, params.global_size, params.n_local_butterflies,
		averageMicroseconds(samples, skip=warmup), trials)
