"""Bundled example scripts for the CLI."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Experiment:
    id: str
    title: str
    description: str
    script: str


EXPERIMENTS: List[Experiment] = [
    Experiment(
        id="classic-double-slit",
        title="Classic double slit, no observation",
        description="Both paths are pure. Nothing distinguishes them: interference.",
        script="""\
which(
    lambda: 1,
    lambda: 0,
)
""",
    ),
    Experiment(
        id="path-observation",
        title="Path observation",
        description="Each path prints different text. Which-path information leaks: collapse.",
        script="""\
def path1():
    print('path1')
    return 1

def path2():
    print('path2')
    return 0

which(path1, path2)
""",
    ),
    Experiment(
        id="one-sided-observation",
        title="One-sided observation",
        description="Only one path has a detector. Output still differs: collapse.",
        script="""\
def path1():
    print('detected')
    return 1

which(path1, lambda: 0)
""",
    ),
    Experiment(
        id="quantum-erasure",
        title="Quantum erasure",
        description="Both paths print the same text. Nothing distinguishes them: interference.",
        script="""\
def path1():
    print('photon detected')
    return 1

def path2():
    print('photon detected')
    return 0

which(path1, path2)
""",
    ),
    Experiment(
        id="imperfect-detector",
        title="Imperfect detector (50% efficiency)",
        description="The detector on path1 fires at random; fringe visibility drops over many runs.",
        script="""\
def path1():
    if math.random() > 0.5:
        print('click')
    return 1

which(path1, lambda: 0)
""",
    ),
    Experiment(
        id="delayed-choice",
        title="Delayed observation",
        description="Observation happens in a deferred call after the path returns. Still collapse.",
        script="""\
def path1():
    set_timeout(lambda: print('path1'), 1000)
    return 1

def path2():
    set_timeout(lambda: print('path2'), 1000)
    return 0

which(path1, path2)
""",
    ),
    Experiment(
        id="delayed-eraser",
        title="Delayed eraser with post-selection",
        description="A deferred random detector; filter a batch by mode to see both patterns.",
        script="""\
def detector():
    if math.random() > 0.5:
        print('which-path: path1')

def path1():
    set_timeout(detector, 500)
    return 1

which(path1, lambda: 0)
""",
    ),
    Experiment(
        id="independent-detectors",
        title="Independent detectors",
        description="Each path has its own random detector and its own random stream.",
        script="""\
def left():
    if math.random() > 0.5:
        print('left')
    return 1

def right():
    if math.random() > 0.5:
        print('right')
    return 0

which(left, right)
""",
    ),
    Experiment(
        id="schrodinger-closed",
        title="Schrodinger's cat, box closed",
        description="State changes inside the paths but is never printed: interference.",
        script="""\
cat = {'status': 'alive'}

def kill():
    cat['status'] = 'dead'
    return 1

def spare():
    cat['status'] = 'alive'
    return 0

which(kill, spare)
""",
    ),
    Experiment(
        id="schrodinger-opened",
        title="Schrodinger's cat, box opened",
        description="The status is printed after which(). The whole program runs per path: collapse.",
        script="""\
cat = {'status': 'alive'}

def kill():
    cat['status'] = 'dead'
    return 1

def spare():
    cat['status'] = 'alive'
    return 0

which(kill, spare)
print(cat['status'])
""",
    ),
    Experiment(
        id="triple-slit",
        title="Three slits",
        description="Three silent paths produce a three-source pattern.",
        script="""\
which(
    lambda: -1,
    lambda: 0,
    lambda: 1,
)
""",
    ),
]

EXPERIMENTS_BY_ID: Dict[str, Experiment] = {e.id: e for e in EXPERIMENTS}


def get_experiment(experiment_id: str) -> Experiment:
    try:
        return EXPERIMENTS_BY_ID[experiment_id]
    except KeyError:
        raise KeyError(f"Unknown experiment: {experiment_id}") from None
