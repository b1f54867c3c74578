"""
OpenCL-specific part of the module.
"""

from contextlib import contextmanager
import logging
import warnings

import numpy
import pyopencl as cl

from .kernel import CompilerOptions, KERNEL_NAME, localMemorySize
from .kernel_helpers import PIXEL_SCALARS, checkSize, pixelCount

logger = logging.getLogger(__name__)


class InsufficientLocalMemory(Exception):
	"""Device local memory cannot hold the intermediate values of the transform"""

	def __init__(self, n, required, available):
		Exception.__init__(self, "not enough local memory on the device for size " + str(n) +
			": " + str(required) + " bytes required, " + str(available) + " available")
		self.n = n
		self.required = required
		self.available = available


def firstDevice():
	"""Default device selection: first device of the first platform"""
	platforms = cl.get_platforms()
	if len(platforms) == 0:
		raise RuntimeError("No OpenCL platforms found")
	devices = platforms[0].get_devices(device_type=cl.device_type.DEFAULT)
	return devices[0]

def deviceByIndex(platform_index, device_index):
	"""Returns device selection strategy which picks the given platform and device"""
	def select():
		platform = cl.get_platforms()[platform_index]
		return platform.get_devices()[device_index]
	return select


class Function:
	"""Wrapper for kernel function"""

	def __init__(self, context, program, name):
		self._context = context
		self._program = program
		self._kernel = getattr(program, name)

	def maxWorkgroupSize(self):
		# depends on the resources this particular kernel uses
		return self._kernel.get_work_group_info(cl.kernel_work_group_info.WORK_GROUP_SIZE,
			self._context.device)

	def __call__(self, queue, params, images):
		"""Enqueues the kernel as a single workgroup and returns its event"""
		global_size = (params.global_size,)
		return self._kernel(queue, global_size, global_size,
			images.input, images.output, cl.LocalMemory(params.local_memory_size))

	def release(self):
		self._kernel = None
		self._program = None


class Module:
	"""Wrapper for OpenCL program"""

	def __init__(self, context, kernel_string, options, compiler_output=False):
		flags = options.flags()
		logger.debug("building program with options %s", " ".join(flags))

		# OpenCL compiler can be a bit noisy sometimes
		with warnings.catch_warnings():
			if not compiler_output:
				warnings.simplefilter("ignore", cl.CompilerWarning)
			self._program = cl.Program(context.context, str(kernel_string)).build(options=flags)

		self._context = context

	def getFunction(self, name=KERNEL_NAME):
		return Function(self._context, self._program, name)


class Context:
	"""Device, context and profiling queue used for all transforms"""

	def __init__(self, select_device=firstDevice, compiler_options=None, compiler_output=False):
		self.device = select_device()
		self.context = cl.Context(devices=[self.device])
		self._queue = cl.CommandQueue(self.context, self.device,
			properties=cl.command_queue_properties.PROFILING_ENABLE)

		self.compiler_options = compiler_options if compiler_options is not None else CompilerOptions()
		self.compiler_output = compiler_output

		self.local_mem_size = self.device.get_info(cl.device_info.LOCAL_MEM_SIZE)

		logger.debug("using device %s, local memory %d bytes", self.device.name, self.local_mem_size)

	@property
	def name(self):
		return self.device.name.strip()

	def compile(self, kernel_string):
		return Module(self, kernel_string, self.compiler_options, compiler_output=self.compiler_output)

	def workgroupLimit(self, kernel_string):
		"""Compiles the kernel, returns its maximum workgroup size and drops it"""
		func = self.compile(kernel_string).getFunction()
		try:
			return func.maxWorkgroupSize()
		finally:
			func.release()

	@contextmanager
	def kernel(self, kernel_string):
		"""Compiled kernel function, held for the duration of the block"""
		func = self.compile(kernel_string).getFunction()
		try:
			yield func
		finally:
			func.release()

	def getQueue(self):
		return self._queue

	def finish(self):
		self._queue.flush()
		self._queue.finish()


class Images:
	"""
	Input and output images of one transform.
	Input holds N real samples, output holds N interleaved complex samples;
	both are RGBA float 1D images. Released on leaving the ``with`` block.
	"""

	def __init__(self, context, data):
		n = data.size
		checkSize(n)
		Images.checkCapacity(context, n)

		self._context = context
		self.n = n
		self.input = None
		self.output = None

		fmt = cl.ImageFormat(cl.channel_order.RGBA, cl.channel_type.FLOAT)
		self._input_width = pixelCount(n)
		self._output_width = pixelCount(2 * n)

		try:
			self.input = cl.Image(context.context, cl.mem_flags.READ_ONLY, fmt,
				shape=(self._input_width,))
			self.output = cl.Image(context.context, cl.mem_flags.WRITE_ONLY, fmt,
				shape=(self._output_width,))
			self._write(data)
		except Exception:
			self.release()
			raise

	@staticmethod
	def checkCapacity(context, n):
		required = localMemorySize(n)
		if context.local_mem_size < required:
			raise InsufficientLocalMemory(n, required, context.local_mem_size)

	def _write(self, data):
		host = numpy.zeros(self._input_width * PIXEL_SCALARS, dtype=numpy.float32)
		host[:self.n] = data
		cl.enqueue_copy(self._context.getQueue(), self.input, host,
			origin=(0,), region=(self._input_width,), is_blocking=True)

	def read(self):
		"""Copies transform result to host, blocking until it is available"""
		host = numpy.empty(self._output_width * PIXEL_SCALARS, dtype=numpy.float32)
		cl.enqueue_copy(self._context.getQueue(), host, self.output,
			origin=(0,), region=(self._output_width,), is_blocking=True)
		return host[:2 * self.n].view(numpy.complex64)

	def release(self):
		for name in ('input', 'output'):
			image = getattr(self, name)
			if image is not None:
				image.release()
				setattr(self, name, None)

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc_value, traceback):
		self.release()
