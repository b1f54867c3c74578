from contextlib import contextmanager, redirect_stdout
import io
import re
import unittest
from unittest import mock

import numpy

from imgfft.cl import Images
from imgfft.emulation import emulateKernel
from imgfft.kernel import loadTemplate
from imgfft.sweep import SweepConfig, runSize, sweep
from imgfft.verify import VerificationError

from helpers import FakeEvent


class EmulatedImages:
	"""Stands in for device images; the kernel is evaluated by the host model"""

	checkCapacity = staticmethod(Images.checkCapacity)
	created = []

	def __init__(self, context, data):
		EmulatedImages.checkCapacity(context, data.size)
		self.data = data
		self.output = None
		self.released = False
		EmulatedImages.created.append(self)

	def read(self):
		return self.output

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc_value, traceback):
		self.released = True


def emulatedFunction(queue, params, images):
	images.output = emulateKernel(images.data, params)
	return FakeEvent(1000, 4000)

def corruptedFunction(queue, params, images):
	images.output = emulateKernel(images.data, params)
	images.output[-1] += 1
	return FakeEvent(1000, 4000)


class EmulatedContext:

	def __init__(self, local_mem_size=65536, limit=lambda multiplicity: 256, func=emulatedFunction):
		self.local_mem_size = local_mem_size
		self._limit = limit
		self._func = func
		self.compiled = []
		self.held = False
		self.finished = False

	def workgroupLimit(self, kernel_string):
		multiplicity = int(re.search(r"#define N_LOCAL_BUTTERFLIES (\d+)", kernel_string).group(1))
		self.compiled.append(multiplicity)
		return self._limit(multiplicity)

	@contextmanager
	def kernel(self, kernel_string):
		self.held = True
		try:
			yield self._func
		finally:
			self.held = False

	def getQueue(self):
		return None

	def finish(self):
		self.finished = True


class TestSweep(unittest.TestCase):

	def setUp(self):
		self.template = loadTemplate()
		EmulatedImages.created = []
		patcher = mock.patch('imgfft.sweep.Images', EmulatedImages)
		patcher.start()
		self.addCleanup(patcher.stop)

	def runSweep(self, context, **kwds):
		kwds.setdefault('warmup', 1)
		kwds.setdefault('trials', 3)
		output = io.StringIO()
		with redirect_stdout(output):
			results = sweep(context, self.template, SweepConfig(**kwds))
		return results, output.getvalue()

	def testEmulatedSweep(self):
		context = EmulatedContext()
		results, output = self.runSweep(context, max_size=4097)

		self.assertEqual([result.n for result in results], [2 ** x for x in range(3, 13)])
		for result in results:
			self.assertTrue(result.verified)
			self.assertEqual(result.average_us, 3)
			self.assertTrue(result.workgroup_size <= 256)
		self.assertTrue("* input size: 4096" in output)
		self.assertTrue(context.finished)
		self.assertTrue(all(images.released for images in EmulatedImages.created))

	def testStopOnInsufficientMemory(self):
		context = EmulatedContext(local_mem_size=2 * 64 * 8)
		results, output = self.runSweep(context, max_size=1025)

		self.assertEqual([result.n for result in results], [8, 16, 32, 64])
		self.assertTrue("not enough local memory" in output)
		self.assertFalse("* input size: 256" in output)
		# rejected before any kernel was compiled
		self.assertEqual(len(context.compiled), 4)
		self.assertEqual(len(EmulatedImages.created), 4)

	def testSkipOnInsufficientMemory(self):
		context = EmulatedContext(local_mem_size=2 * 64 * 8)
		results, output = self.runSweep(context, max_size=1025, stop_on_insufficient_memory=False)

		self.assertEqual([result.n for result in results], [8, 16, 32, 64])
		self.assertTrue("* input size: 1024" in output)

	def testReproducibleInput(self):
		self.runSweep(EmulatedContext(), max_size=17, verify=False)
		random_state = numpy.random.RandomState(0)
		for images, n in zip(EmulatedImages.created, [8, 16]):
			expected = random_state.uniform(0.0, 1.0, n).astype(numpy.float32)
			self.assertTrue(numpy.array_equal(images.data, expected))

	def testPlannerRecompiles(self):
		context = EmulatedContext(limit=lambda multiplicity: 64)
		results, output = self.runSweep(context, start=1024, max_size=1025)

		self.assertEqual(context.compiled, [1, 8])
		self.assertEqual(results[0].multiplicity, 8)
		self.assertEqual(results[0].workgroup_size, 64)
		self.assertTrue("run kernels using global size : 64" in output)

	def testVerificationFailureIsFatal(self):
		context = EmulatedContext(func=corruptedFunction)
		output = io.StringIO()
		with redirect_stdout(output):
			self.assertRaises(VerificationError, sweep, context, self.template,
				SweepConfig(warmup=1, trials=3))
		self.assertFalse(context.held)
		self.assertTrue(EmulatedImages.created[0].released)
		self.assertFalse(context.finished)

	def testNoVerification(self):
		context = EmulatedContext(func=corruptedFunction)
		results, output = self.runSweep(context, max_size=33, verify=False)
		self.assertEqual(len(results), 3)
		self.assertTrue(all(result.verified is None for result in results))

	def testWrongSize(self):
		context = EmulatedContext()
		self.assertRaises(ValueError, runSize, context, self.template,
			numpy.zeros(12, dtype=numpy.float32), SweepConfig())
		self.assertEqual(context.compiled, [])
		self.assertEqual(EmulatedImages.created, [])


class TestSweepConfig(unittest.TestCase):

	def testSizes(self):
		self.assertEqual(list(SweepConfig(max_size=100).sizes()), [8, 16, 32, 64])
		self.assertEqual(len(list(SweepConfig().sizes())), 21)

	def testWrongStart(self):
		self.assertRaises(ValueError, SweepConfig, start=12)


if __name__ == "__main__":
	unittest.main()
