import logging

from .kernel import KernelParams
from .kernel_helpers import nextPowerOfTwo

logger = logging.getLogger(__name__)

# Planner states, used in diagnostics only
COMPILING = "Compiling"
QUERYING_LIMITS = "QueryingLimits"
FITTING = "Fitting"
ACCEPTED = "Accepted"


class DispatchPlan:
	"""Accepted launch configuration for one transform size"""

	def __init__(self, params, max_workgroup_size, attempts):
		self.params = params
		self.max_workgroup_size = max_workgroup_size
		self.attempts = attempts

	@property
	def multiplicity(self):
		return self.params.n_local_butterflies

	@property
	def workgroup_size(self):
		return self.params.global_size

	def __repr__(self):
		return "DispatchPlan(" + repr(self.params) + ", max_workgroup_size=" + \
			str(self.max_workgroup_size) + ", attempts=" + str(self.attempts) + ")"


def nextMultiplicity(n_butterflies, multiplicity, max_workgroup_size):
	"""
	Estimates the number of butterflies per thread for the next attempt,
	assuming that the workgroup limit will not grow when it increases.
	"""
	estimate = nextPowerOfTwo(n_butterflies // max_workgroup_size)
	if estimate <= multiplicity:
		estimate = multiplicity * 2
	return min(estimate, n_butterflies)

def fits(n_butterflies, multiplicity, max_workgroup_size):
	return n_butterflies <= multiplicity * max_workgroup_size

def planMultiplicity(n_butterflies, queryLimit):
	"""
	Finds the number of butterflies per thread which lets the whole transform
	run in one workgroup. ``queryLimit(multiplicity)`` must compile the kernel
	for given multiplicity and return its maximum workgroup size.
	Returns tuple (multiplicity, max_workgroup_size, attempts).
	"""
	multiplicity = 1
	attempts = 0

	while True:
		logger.debug("%s: %d butterflies, %d per thread", COMPILING, n_butterflies, multiplicity)
		attempts += 1
		max_workgroup_size = queryLimit(multiplicity)
		logger.debug("%s: workgroup max size %d", QUERYING_LIMITS, max_workgroup_size)

		if max_workgroup_size < 1:
			raise ValueError("Device reported workgroup max size " + str(max_workgroup_size))

		if fits(n_butterflies, multiplicity, max_workgroup_size):
			logger.debug("%s: %d butterflies per thread", ACCEPTED, multiplicity)
			return multiplicity, max_workgroup_size, attempts

		multiplicity = nextMultiplicity(n_butterflies, multiplicity, max_workgroup_size)
		logger.debug("%s: retrying with %d butterflies per thread", FITTING, multiplicity)

def plan(n, queryLimit):
	"""
	Plans kernel launch for transform size n.
	``queryLimit(params)`` receives KernelParams of each candidate and must
	return the maximum workgroup size of the compiled kernel
	(releasing the kernel before returning).
	"""
	params = KernelParams(n)
	multiplicity, max_workgroup_size, attempts = planMultiplicity(
		params.n_global_butterflies,
		lambda multiplicity: queryLimit(params.withMultiplicity(multiplicity)))
	return DispatchPlan(params.withMultiplicity(multiplicity), max_workgroup_size, attempts)
