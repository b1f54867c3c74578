"""
Host-side transforms used to check device results.
"""

import numpy

from .kernel_helpers import checkSize, log2


def referenceFFT(data):
	"""Trusted forward transform of a real signal, in double precision"""
	return numpy.fft.fft(numpy.asarray(data, dtype=numpy.float64))

def bitReversedIndices(n):
	checkSize(n)
	bits = log2(n)
	indices = numpy.arange(n)
	reversed_indices = numpy.zeros(n, dtype=indices.dtype)
	for bit in range(bits):
		reversed_indices |= ((indices >> bit) & 1) << (bits - 1 - bit)
	return reversed_indices

def bitReverse(data):
	data = numpy.asarray(data)
	return data[bitReversedIndices(data.size)]

def cpuButterflyFFT(data):
	"""
	Iterative radix-2 decimation-in-time transform.
	Expects the input in bit-reversed order, returns natural order.
	"""
	result = numpy.array(data, dtype=numpy.complex128)
	n = result.size
	checkSize(n)

	half = 1
	while half < n:
		k = numpy.arange(half)
		twiddles = numpy.exp(-1j * numpy.pi * k / half)
		blocks = result.reshape(n // (2 * half), 2 * half)
		top = blocks[:, :half].copy()
		bottom = blocks[:, half:] * twiddles
		blocks[:, :half] = top + bottom
		blocks[:, half:] = top - bottom
		half *= 2

	return result
