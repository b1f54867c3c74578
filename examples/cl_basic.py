from imgfft.cl import Context, Images
from imgfft.benchmark import runBenchmark
from imgfft.kernel import loadTemplate
from imgfft.sweep import planKernel
from imgfft.verify import verifyOutput
import numpy

# initialize context
context = Context()
template = loadTemplate()

# plan kernel launch
n = 1024
dispatch = planKernel(context, template, n)
print(dispatch)

# prepare data
data = numpy.random.RandomState(0).uniform(0.0, 1.0, n).astype(numpy.float32)

# forward transform
with context.kernel(template.render(dispatch.params)) as func:
	with Images(context, data) as images:
		result = runBenchmark(context, func, dispatch.params, images, trials=100)
		output = images.read()

print(result)
print(verifyOutput(data, output) < 0.01)
