# -- Persistence I/O Package -- #

'''
Sequential binary streams used for saving and restoring model state.

Sean Bowman [02/06/2026]
'''

from boundaryCoupling.io.binaryStream import BinaryFileReader, BinaryFileWriter
