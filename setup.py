from setuptools import setup

dependencies = [
      'numpy>=1.20',
      'click>=8.2,<9',
      'pyyaml>=5',
      'importlib_resources>=5'
]

setup(name='bfi',
      version='1.0',
      description='bfi: a BrainF**k interpreter with a bounded tape and precomputed jumps',
      author='bfi contributors',
      packages=['bfi', 'bfi.programs'],
      install_requires=dependencies,
      extras_require={
            'test': ['pytest']
      },
      package_data={'bfi.programs': ['*.bf']},
      include_package_data=True,
      license='Apache 2.0',
      entry_points='''
            [console_scripts]
            bfi-run=bfi.run:run
      ''',
     )
