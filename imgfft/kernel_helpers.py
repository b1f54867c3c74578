import math

import numpy


def log2(n):
	pos = 0
	while n > 1:
		n //= 2
		pos += 1
	return pos

def isPowerOfTwo(n):
	return n >= 1 and (n & (n - 1)) == 0

def nextPowerOfTwo(n):
	"""Smallest power of two which is not less than n (1 for n <= 1)"""
	power = 1
	while power < n:
		power *= 2
	return power

def checkSize(n):
	"""Rejects transform sizes the butterfly network cannot handle"""
	if not isinstance(n, (int, numpy.integer)):
		raise ValueError("Transform size must be an integer, got " + repr(n))
	if n < 2 or not isPowerOfTwo(n):
		raise ValueError("Transform size must be a power of two not less than 2, got " + str(n))

def hexFloatLiteral(value):
	"""
	Returns single precision C99 hexadecimal literal for given value.
	Value is rounded to float32 first, so the literal is exactly
	what the device will use, independently of compiler's decimal parsing.
	"""
	return float(numpy.float32(value)).hex() + "f"

def parseHexFloatLiteral(literal):
	if literal.endswith("f"):
		literal = literal[:-1]
	return float.fromhex(literal)

def twiddleAngle(n_global_butterflies):
	return -math.pi / n_global_butterflies

# RGBA float pixels, four scalars each
PIXEL_SCALARS = 4

def pixelCount(scalars):
	"""Number of whole RGBA pixels holding given number of float scalars"""
	return (scalars + PIXEL_SCALARS - 1) // PIXEL_SCALARS
