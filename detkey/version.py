"""DetKey Meta information.
   DetKey derives reproducible SSH and TLS key pairs from a master password.
"""
__title__ = 'detkey'
__description__ = (
   'DetKey derives reproducible SSH and TLS key pairs '
   'from a master password and a context string.'
)
__version__ = '0.4.0'
__copyright__ = 'Copyright (c) 2025 DetKey Authors'
__author__ = 'DetKey Authors'
__author_email__ = 'detkey@users.noreply.github.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/lisonyang/detkey'
