import sys
from pathlib import Path

# Ensure project src is on sys.path
repo_root = Path(__file__).resolve().parents[1]
src_dir = repo_root / 'src'
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from Dojodesk.app_init import initialize_database  # noqa: E402
from Dojodesk.paths import get_db_path  # noqa: E402

if __name__ == '__main__':
    print(f'Running smoke check against {get_db_path()}...')
    applied = initialize_database()
    print(f'Migrations applied: {applied or "none (up to date)"}')
    print('Smoke check completed.')
