import logging

import numpy

from .reference import bitReverse, cpuButterflyFFT, referenceFFT

logger = logging.getLogger(__name__)

# Butterflies only add and subtract, so rounding errors do not grow
# multiplicatively with the transform size; a fixed absolute bound is used.
DEVICE_TOLERANCE = 0.01
REFERENCE_TOLERANCE = 1e-4


class VerificationError(AssertionError):

	def __init__(self, index, actual, expected, tolerance):
		AssertionError.__init__(self, "element " + str(index) + " differs: " + str(actual) +
			" vs " + str(expected) + " (tolerance " + str(tolerance) + ")")
		self.index = index
		self.actual = actual
		self.expected = expected
		self.tolerance = tolerance


def verifyVectorsAreEqual(actual, expected, tolerance):
	actual = numpy.asarray(actual)
	expected = numpy.asarray(expected)
	if actual.shape != expected.shape:
		raise ValueError("Shapes differ: " + str(actual.shape) + " vs " + str(expected.shape))

	# real and imaginary parts are checked separately
	diff = numpy.maximum(
		numpy.abs(actual.real - expected.real),
		numpy.abs(actual.imag - expected.imag))
	bad = numpy.nonzero(~(diff <= tolerance))[0]
	if bad.size > 0:
		index = int(bad[0])
		raise VerificationError(index, actual[index], expected[index], tolerance)

	return float(diff.max()) if diff.size > 0 else 0.0

def verifyReferenceConsistency(data, tolerance=REFERENCE_TOLERANCE):
	"""
	Checks that the reference transform equals the butterfly network
	applied to bit-reversed input.
	"""
	return verifyVectorsAreEqual(cpuButterflyFFT(bitReverse(data)), referenceFFT(data), tolerance)

def verifyOutput(data, output, tolerance=DEVICE_TOLERANCE):
	error = verifyVectorsAreEqual(output, referenceFFT(data), tolerance)
	logger.debug("max absolute error %g", error)
	return error
