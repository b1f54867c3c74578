"""
Host model of the butterfly kernel.

Executes the same index and twiddle arithmetic as ``kernel.mako`` in single precision.
All threads run the same instruction stream between barriers, so each barrier
interval is evaluated as one vectorized numpy step over every butterfly index.
"""

import numpy

from .kernel_helpers import PIXEL_SCALARS, parseHexFloatLiteral, pixelCount


def butterflyIndices(params):
	"""Butterfly indices in the order threads process them: k = tid + m * threads"""
	threads = params.global_size
	tid = numpy.arange(threads)
	m = numpy.arange(params.n_local_butterflies)
	return (tid[numpy.newaxis, :] + m[:, numpy.newaxis] * threads).ravel()

def twiddles(t, params):
	angle = numpy.float32(parseHexFloatLiteral(params.minus_pi_over_n_global_butterflies))
	theta = t.astype(numpy.float32) * angle
	result = numpy.empty(t.shape, dtype=numpy.complex64)
	result.real = numpy.cos(theta)
	result.imag = numpy.sin(theta)
	return result

def emulateKernel(data, params):
	data = numpy.asarray(data, dtype=numpy.float32)
	if data.size != params.n:
		raise ValueError("Expected " + str(params.n) + " samples, got " + str(data.size))

	ng = params.n_global_butterflies
	k = butterflyIndices(params)

	src = numpy.empty(params.n, dtype=numpy.complex64)
	dst = numpy.empty(params.n, dtype=numpy.complex64)

	# widening: thread k reads pixel k >> 1, the xy half for even k and zw for odd k
	pixels = numpy.zeros(pixelCount(params.n) * PIXEL_SCALARS, dtype=numpy.float32)
	pixels[:params.n] = data
	pixels = pixels.reshape(-1, PIXEL_SCALARS)
	pairs = numpy.where((k & 1)[:, numpy.newaxis] == 1, pixels[k >> 1, 2:], pixels[k >> 1, :2])
	src[2 * k] = pairs[:, 0]
	src[2 * k + 1] = pairs[:, 1]

	for stage in range(params.log2_n_global_butterflies + 1):
		i = 1 << stage
		stride = 1 << (params.log2_n_global_butterflies - stage)

		j = k & (i - 1)
		idx = i * (k >> stage) + k
		u0 = src[k]
		u1 = src[k + ng] * twiddles(j * stride, params)
		dst[idx] = u0 + u1
		dst[idx + i] = u0 - u1

		src, dst = dst, src

	# output pixel k holds samples 2k and 2k+1 as (re, im, re, im)
	output = numpy.empty((pixelCount(2 * params.n), PIXEL_SCALARS), dtype=numpy.float32)
	output[k, 0] = src[2 * k].real
	output[k, 1] = src[2 * k].imag
	output[k, 2] = src[2 * k + 1].real
	output[k, 3] = src[2 * k + 1].imag
	return output.ravel()[:2 * params.n].view(numpy.complex64)
