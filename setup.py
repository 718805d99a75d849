from setuptools import setup, find_packages

install_requires = ['numpy', 'pandas', 'spiceypy', 'lxml', 'matplotlib']

setup(name='msis',
      version='2.0.0',
      description='Moon Surface Illumination Simulation: the geometry engine and scene generation for synthetic '
                  'renderings of the lunar surface',
      packages=find_packages(include=['msis', 'msis.*']),
      python_requires='>=3.10',
      install_requires=install_requires,
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['msis=msis.scripts.simulate:main']})
