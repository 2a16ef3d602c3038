# -- Logging Configuration -- #

'''
Sets up the package logger for boundaryCoupling.

Modules log through logging.getLogger(__name__); this helper attaches
handlers to the 'boundaryCoupling' namespace logger only, leaving the
root logger to the host application.

Sean Bowman [02/05/2026]
'''

from __future__ import annotations

import logging
import sys


def setupLogging(level: int = logging.INFO, logFile: str | None = None) -> logging.Logger:
    '''
    Configure the 'boundaryCoupling' namespace logger.

    Parameters:
    -----------
    level : int
        Logging level (e.g. logging.DEBUG, logging.INFO)
    logFile : str | None
        Optional path to also write log records to

    Returns:
    --------
    logging.Logger : The configured package logger
    '''
    logger = logging.getLogger('boundaryCoupling')
    logger.setLevel(level)

    # Avoid duplicate records when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
    )

    consoleHandler = logging.StreamHandler(sys.stdout)
    consoleHandler.setLevel(level)
    consoleHandler.setFormatter(formatter)
    logger.addHandler(consoleHandler)

    if logFile:
        fileHandler = logging.FileHandler(logFile, mode='w', encoding='utf-8')
        fileHandler.setLevel(level)
        fileHandler.setFormatter(formatter)
        logger.addHandler(fileHandler)

    logger.info('Logging initialized.')
    return logger
