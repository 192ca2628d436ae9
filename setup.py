from setuptools import setup

setup(
    name='trc-reader',
    version='0.1.0',
    description='Decoder for Tomb Raider 4 era (TRC) level files',
    packages=['tr_utils', 'tr_handlers', 'tr_handlers.trc'],
    py_modules=['trc_settings', 'console_logger'],
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'PySide6',
    ],
)
