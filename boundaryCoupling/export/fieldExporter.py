# -- Boundary Field Exporter -- #

'''
Exports boundary model snapshots as JSON for visualization.

The exporter knows nothing about individual quantities: it walks the
model's field registry and writes every field flagged storeData.
Extension fields added by other components show up automatically.

Output JSON format:
{
    "meta": { "type": "boundaryModel", "created": "...", "nParticles": N, ... },
    "fields": [ {"name": "position", "type": "vector3"}, ... ],
    "frames": [
        { "time": 0.0, "sorted": false, "data": { "position": [[x, y, z], ...], ... } },
        ...
    ]
}

Sean Bowman [02/07/2026]
'''

from __future__ import annotations

import json
import logging
import os
from datetime import datetime

import numpy as np

from boundaryCoupling.sph.fieldRegistry import FieldDescription

logger = logging.getLogger(__name__)


class FieldExporter:
    '''
    Collects registry-driven frames of a boundary model.

    Usage:
        exporter = FieldExporter()
        exporter.addFrame(time, model)
        exporter.export(outputDir='output', name='boundary')

    Parameters:
    -----------
    decimals : int
        Rounding applied to floating-point values
    '''

    def __init__(self, decimals: int = 6) -> None:
        self._decimals = decimals
        self._frames: list[dict] = []
        self._fieldInfo: list[dict] = []
        self._nParticles: int = 0

    @property
    def nFrames(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> list[dict]:
        return self._frames

    def _fieldValues(self, field: FieldDescription, nParticles: int) -> list:
        data = field.data()
        if data is None:
            data = np.array([field.get(i) for i in range(nParticles)])
        data = np.asarray(data)
        if np.issubdtype(data.dtype, np.floating):
            data = np.round(data, self._decimals)
        return data.tolist()

    def addFrame(self, time: float, model) -> None:
        '''
        Record every storeData field of the model.

        Parameters:
        -----------
        time : float
            Simulation time of the snapshot [s]
        model : BoundaryModelAkinci2012
            Boundary model to snapshot
        '''
        nParticles = model.numberOfParticles()
        storedFields = [f for f in model.getFields() if f.storeData]

        self._nParticles = nParticles
        self._fieldInfo = [
            {'name': f.name, 'type': f.fieldType.value} for f in storedFields
        ]
        self._frames.append({
            'time': round(time, 6),
            'sorted': model.isSorted(),
            'data': {f.name: self._fieldValues(f, nParticles) for f in storedFields},
        })

    def toDict(self) -> dict:
        return {
            'meta': {
                'type': 'boundaryModel',
                'created': datetime.now().isoformat(),
                'nParticles': self._nParticles,
                'nFrames': self.nFrames,
            },
            'fields': self._fieldInfo,
            'frames': self._frames,
        }

    def export(self, outputDir: str = 'output', name: str = 'boundary') -> str:
        '''
        Write all collected frames to <outputDir>/<name>_frames.json.

        Returns:
        --------
        str : Path to the written file
        '''
        os.makedirs(outputDir, exist_ok=True)
        outputPath = os.path.join(outputDir, f'{name}_frames.json')
        with open(outputPath, 'w') as f:
            json.dump(self.toDict(), f)

        logger.info('Exported %d frames to %s', self.nFrames, outputPath)
        return outputPath
