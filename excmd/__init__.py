'''
An ``:``-command line for a modal text editor: tokenizing, argument
parsing, command dispatch with live preview, and argument completion.
'''

__version__ = '0.1.0'
