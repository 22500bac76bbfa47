import os
from setuptools import setup, find_packages
from setuptools.command.build_py import build_py as _build

CLASSIFIERS = [
    'Operating System :: POSIX',
    'Intended Audience :: System Administrators',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: System :: Systems Administration'
]

PKGDIR = os.path.dirname(os.path.abspath(__file__))
PYDIR = os.path.join(PKGDIR, 'python')

def get_version():
    out = "dev"
    versfile = os.path.join(PKGDIR, 'VERSION')
    if os.path.exists(versfile):
        with open(versfile) as fd:
            parts = fd.readline().split()
        if len(parts) > 0:
            out = parts[-1]
    else:
        out = "(unknown)"
    return out

def write_version_mod(version):
    appmeshdir = os.path.join(PYDIR, 'appmesh')
    for pkg in [f for f in os.listdir(appmeshdir) \
                  if not f.startswith('_') and not f.startswith('.')
                     and os.path.isdir(os.path.join(appmeshdir, f))]:
        versmodf = os.path.join(appmeshdir, pkg, "version.py")
        with open(versmodf, 'w') as fd:
            fd.write('"""')
            fd.write("""
An identification of the subsystem version.  Note that this module file gets 
(over-) written by the build process.  
""")
            fd.write('"""\n\n')
            fd.write('__version__ = "')
            fd.write(version)
            fd.write('"\n')

class build(_build):

    def run(self):
        write_version_mod(get_version())
        _build.run(self)

setup(name='appmesh-rest',
      version=get_version(),
      description="appmesh: the REST dispatching and JWT authorization layer of the App Mesh daemon",
      python_requires='>=3.8',
      package_dir={'': 'python'},
      packages=find_packages(where='python', include=['appmesh', 'appmesh.*']),
      install_requires=[ 'PyJWT>=2.8', 'requests', 'PyYAML' ],
      extras_require={ 'test': [ 'pytest' ] },
      scripts=[ 'scripts/appmesh-rest-uwsgi.py' ],
      cmdclass={'build_py': build},
      classifiers=CLASSIFIERS,
      zip_safe=False
)
