# -- Export Package -- #

'''
JSON export of boundary model fields for visualization.

Sean Bowman [02/07/2026]
'''

from boundaryCoupling.export.fieldExporter import FieldExporter
