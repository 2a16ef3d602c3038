# -- Configuration Tests -- #

'''Tests for configuration loading and logging setup.'''

import json
import logging

import pytest

from boundaryCoupling import constants as const
from boundaryCoupling.loggingConfig import setupLogging
from boundaryCoupling.sph.protocols import BoundaryConfig


class TestBoundaryConfig:

    def test_defaults(self):
        config = BoundaryConfig()
        assert config.referenceDensity == const.referenceDensity
        assert config.kernelType == const.defaultKernelType
        assert not config.strongCoupling

    def test_derived_lengths(self):
        config = BoundaryConfig(particleRadius=0.05, smoothingLengthRatio=1.5)
        assert config.particleSpacing == pytest.approx(0.1)
        assert config.smoothingLength == pytest.approx(0.15)
        assert config.supportRadius == pytest.approx(0.3)

    @pytest.mark.parametrize('kwargs', [
        {'particleRadius': 0.0},
        {'smoothingLengthRatio': -1.0},
        {'dimensions': 4},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            BoundaryConfig(**kwargs)

    def test_from_json(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({
            'sph': {'particleRadius': 0.01, 'kernelType': 'wendlandC2'},
            'fluid': {'density': 998.0},
            'boundary': {'strongCoupling': True},
        }))

        config = BoundaryConfig.fromJson(str(path))

        assert config.particleRadius == 0.01
        assert config.kernelType == 'wendlandC2'
        assert config.referenceDensity == 998.0
        assert config.strongCoupling
        assert config.smoothingLengthRatio == const.defaultSmoothingLengthRatio


class TestLogging:

    def test_package_logger_configured(self, tmp_path):
        logFile = tmp_path / 'run.log'
        logger = setupLogging(logging.DEBUG, str(logFile))
        try:
            logging.getLogger('boundaryCoupling.sph.boundaryModel').debug('hello')
            for handler in logger.handlers:
                handler.flush()

            assert logger.name == 'boundaryCoupling'
            assert len(logger.handlers) == 2
            assert 'hello' in logFile.read_text()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_repeated_setup_does_not_duplicate(self):
        logger = setupLogging()
        setupLogging()
        try:
            assert len(logger.handlers) == 1
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
