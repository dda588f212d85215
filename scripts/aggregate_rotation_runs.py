"""Script d'agrégation des exécutions de la rotation du coffre.

Lecture du fichier `logs/vault.log` et extraction des lignes "[rotation]".
Chaque ligne contient `job:<NOM>` suivi de compteurs `clé:valeur` et de
`duration_ms:<MS>`.

Usage:
    python scripts/aggregate_rotation_runs.py [chemin/vers/vault.log]

Il calcule pour chaque job : nombre d'exécutions, total de chaque compteur,
durée moyenne et maximale (ms).
"""

import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
LOG = Path(sys.argv[1]) if len(sys.argv) > 1 else ROOT / 'logs' / 'vault.log'

if not LOG.exists():
    print(f"Fichier de log introuvable : {LOG}")
    raise SystemExit(1)

line_pattern = re.compile(r"\[rotation\].*job:(?P<job>\S+)(?P<rest>.*)")
field_pattern = re.compile(r"(?P<key>[a-z_]+):(?P<value>\d+)")

runs = {}
with open(LOG, encoding='utf-8') as f:
    for line in f:
        m = line_pattern.search(line)
        if not m:
            continue
        counters = {k: int(v) for k, v in field_pattern.findall(m.group('rest'))}
        runs.setdefault(m.group('job'), []).append(counters)

print(f"Found {len(runs)} jobs with data\n")
for job, samples in sorted(runs.items()):
    durations = [s.pop('duration_ms', 0) for s in samples]
    totals = {}
    for sample in samples:
        for key, value in sample.items():
            totals[key] = totals.get(key, 0) + value
    avg = int(sum(durations) / len(durations))
    print(f"{job}: runs={len(samples)} avg_ms={avg} max_ms={max(durations)}")
    for key, value in sorted(totals.items()):
        print(f"  {key}={value}")
