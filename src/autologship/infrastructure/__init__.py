"""
Infrastructure layer package.

SQL Server access (pyodbc), configuration files and logging setup.
SqlConnector is not re-exported here so that importing the package does not
require the ODBC driver manager.
"""
