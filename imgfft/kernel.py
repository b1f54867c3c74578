import logging
import os.path
import re

from mako.template import Template

from .kernel_helpers import checkSize, hexFloatLiteral, log2, twiddleAngle

logger = logging.getLogger(__name__)

_dir, _file = os.path.split(os.path.abspath(__file__))
DEFAULT_TEMPLATE = os.path.join(_dir, 'kernel.mako')

KERNEL_NAME = "kernel_func"

# size of one complex sample in device memory (float2)
COMPLEX_NBYTES = 8

TOKENS = (
	'replace_MINUS_PI_over_N_GLOBAL_BUTTERFLIES',
	'replace_N_GLOBAL_BUTTERFLIES',
	'replace_LOG2_N_GLOBAL_BUTTERFLIES',
	'replace_N_LOCAL_BUTTERFLIES',
)

_token_re = re.compile(r"\breplace_\w+")


def localMemorySize(n):
	"""Bytes of local scratch: two halves of n complex samples, source and destination of each stage"""
	return 2 * n * COMPLEX_NBYTES


class KernelParams:
	"""
	Size-dependent constants of the butterfly kernel.
	Derived from transform size and number of butterflies processed by each thread.
	"""

	def __init__(self, n, multiplicity=1):
		checkSize(n)

		self.n = n
		self.n_global_butterflies = n // 2
		self.log2_n_global_butterflies = log2(self.n_global_butterflies)

		if multiplicity < 1 or self.n_global_butterflies % multiplicity != 0:
			raise ValueError("Number of butterflies per thread (" + str(multiplicity) +
				") must divide the number of butterflies (" + str(self.n_global_butterflies) + ")")

		self.n_local_butterflies = multiplicity
		self.minus_pi_over_n_global_butterflies = hexFloatLiteral(
			twiddleAngle(self.n_global_butterflies))

	@property
	def multiplicity(self):
		return self.n_local_butterflies

	@property
	def global_size(self):
		# the kernel runs as a single workgroup, so this is the local size too
		return self.n_global_butterflies // self.n_local_butterflies

	@property
	def local_memory_size(self):
		return localMemorySize(self.n)

	def withMultiplicity(self, multiplicity):
		return KernelParams(self.n, multiplicity)

	def substitutions(self):
		return {
			'replace_MINUS_PI_over_N_GLOBAL_BUTTERFLIES': self.minus_pi_over_n_global_butterflies,
			'replace_N_GLOBAL_BUTTERFLIES': str(self.n_global_butterflies),
			'replace_LOG2_N_GLOBAL_BUTTERFLIES': str(self.log2_n_global_butterflies),
			'replace_N_LOCAL_BUTTERFLIES': str(self.n_local_butterflies),
		}

	def __eq__(self, other):
		return isinstance(other, KernelParams) and \
			self.n == other.n and self.n_local_butterflies == other.n_local_butterflies

	def __ne__(self, other):
		return not self == other

	def __hash__(self):
		return hash((self.n, self.n_local_butterflies))

	def __repr__(self):
		return "KernelParams(" + str(self.n) + ", " + str(self.n_local_butterflies) + ")"


class CompilerOptions:
	"""Recognized OpenCL compiler options"""

	def __init__(self, denorms_are_zero=True, strict_aliasing=True,
			fast_relaxed_math=True, include_dirs=None):
		self.denorms_are_zero = denorms_are_zero
		self.strict_aliasing = strict_aliasing
		# faster twiddle factors at the cost of a bit of precision
		self.fast_relaxed_math = fast_relaxed_math
		self.include_dirs = list(include_dirs) if include_dirs else []

	def flags(self):
		flags = []
		for include_dir in self.include_dirs:
			flags.extend(["-I", include_dir])
		if self.denorms_are_zero:
			flags.append("-cl-denorms-are-zero")
		if self.strict_aliasing:
			flags.append("-cl-strict-aliasing")
		if self.fast_relaxed_math:
			flags.append("-cl-fast-relaxed-math")
		return flags


class KernelTemplate:
	"""
	Kernel source with placeholder tokens.
	Plain templates only get their tokens replaced, so lines starting with '%' or '##'
	and '${' sequences are kept as written; other templates are rendered with mako.
	"""

	def __init__(self, text, plain=False):
		self.text = text
		self.plain = plain

	def render(self, params):
		return renderKernel(self.text, params, plain=self.plain)


def loadTemplate(path=None):
	"""
	Reads kernel template. Files with .mako extension are mako templates,
	everything else is treated as plain OpenCL source.
	"""
	if path is None:
		path = DEFAULT_TEMPLATE
	with open(path) as f:
		text = f.read()
	return KernelTemplate(text, plain=not path.endswith('.mako'))

def findTokens(source):
	return sorted(set(_token_re.findall(source)))

def _replaceTokens(template_text, substitutions):
	def replace(match):
		token = match.group(0)
		if token not in substitutions:
			raise ValueError("Unknown placeholder: " + token)
		return substitutions[token]
	return _token_re.sub(replace, template_text)

def renderKernel(template_text, params, plain=False):
	"""
	Returns kernel source for given parameters.
	Every placeholder token is replaced by its literal value;
	unknown tokens make rendering fail.
	"""
	if plain:
		source = _replaceTokens(template_text, params.substitutions())
	else:
		# bare tokens become mako expressions, so the template can use mako constructs too
		mako_text = _token_re.sub(lambda match: "${" + match.group(0) + "}", template_text)
		source = Template(mako_text, strict_undefined=True).render(**params.substitutions())

	survivors = findTokens(source)
	if len(survivors) > 0:
		raise ValueError("Placeholders survived substitution: " + ", ".join(survivors))

	logger.debug("rendered kernel for %r", params)
	return source
