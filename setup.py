from setuptools import setup, find_packages

setup(
    name='shaderdeck',
    version='0.1.0',
    author='nassimberrada',
    author_email='your.email@example.com',
    description='A GLSL asset pipeline with #include resolution and annotated, live-tunable uniforms.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/yourusername/shaderdeck',
    packages=find_packages(exclude=['tests', 'examples']),
    include_package_data=True,
    package_data={'shaderdeck': ['shaders/*.glsl', 'shaders/*.vert', 'shaders/*.frag']},
    install_requires=[
        'numpy',
        'watchdog',
        'moderngl',
        'glfw',
        'imgui[glfw]',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics :: 3D Rendering',
    ],
    python_requires='>=3.7',
)
