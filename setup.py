import sys
major, minor = sys.version_info[:2]
if major < 3:
	print("Python 3 is required to use this module.")
	sys.exit(1)

from setuptools import setup

import os.path

setup_dir = os.path.split(os.path.abspath(__file__))[0]
with open(os.path.join(setup_dir, 'README.rst')) as f:
	DOCUMENTATION = f.read()

imgfft_path = os.path.join(setup_dir, 'imgfft', '__init__.py')
globals_dict = {}
with open(imgfft_path) as f:
	exec(f.read(), globals_dict)
VERSION = '.'.join([str(x) for x in globals_dict['VERSION']])

dependencies = ['mako', 'numpy', 'pyopencl']

setup(
	name='imgfft',
	packages=['imgfft'],
	provides=['imgfft'],
	install_requires=dependencies,
	package_data={'imgfft': ['*.mako']},
	python_requires='>=3.6',
	version=VERSION,
	description='Benchmark of an image-resident Stockham FFT kernel for PyOpenCL',
	long_description=DOCUMENTATION,
	classifiers=[
		'Development Status :: 3 - Alpha',
		'Intended Audience :: Developers',
		'License :: OSI Approved :: MIT License',
		'Operating System :: OS Independent',
		'Programming Language :: Python :: 3',
		'Topic :: Scientific/Engineering :: Mathematics'
	]
)
