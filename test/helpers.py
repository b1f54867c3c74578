import numpy


def isCLAvailable():
	"""True if pyopencl is importable and at least one device is present"""
	try:
		import pyopencl
		for platform in pyopencl.get_platforms():
			if len(platform.get_devices()) > 0:
				return True
	except Exception:
		pass
	return False

def createContext(**kwds):
	from imgfft.cl import Context
	return Context(**kwds)

def getTestData(n, seed=0):
	return numpy.random.RandomState(seed).uniform(0.0, 1.0, n).astype(numpy.float32)


class FakeProfile:

	def __init__(self, start, end):
		self.start = start
		self.end = end


class FakeEvent:

	def __init__(self, start, end):
		self.profile = FakeProfile(start, end)
		self.waited = False

	def wait(self):
		self.waited = True
