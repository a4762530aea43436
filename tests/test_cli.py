import json

import pytest

import main
from claimreport.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _write_bundle(path, file_url=None):
    payload = {
        'submission': {'organisation_name': 'Green Rail Association', 'country_code': 'DE'},
        'participants': [{'full_name': 'Alice Meyer'}],
        'tickets': [
            {'from_location': 'Berlin', 'to_location': 'Lisbon', 'amount_eur': 45.5, 'file_url': file_url},
        ],
        'rates': {'standard': 20, 'green': 10},
    }
    path.write_text(json.dumps(payload), encoding='utf-8')


def test_render_command_writes_pdf(tmp_path, capsys, make_pdf):
    tickets = tmp_path / 'tickets'
    tickets.mkdir()
    (tickets / 'scan.pdf').write_bytes(make_pdf(2))
    bundle_path = tmp_path / 'bundle.json'
    _write_bundle(bundle_path, file_url='scan.pdf')

    code = main.main(
        [
            'render',
            '--input', str(bundle_path),
            '--kind', 'partner',
            '--output-dir', str(tmp_path / 'out'),
            '--tickets-dir', str(tickets),
        ]
    )

    output = json.loads(capsys.readouterr().out)
    assert code == 0
    assert output['status'] == 'delivered'
    assert output['page_count'] == 3
    assert (tmp_path / 'out' / 'reimbursement_Green_Rail_Association.pdf').is_file()


def test_render_command_rejects_missing_input(tmp_path, capsys):
    code = main.main(['render', '--input', str(tmp_path / 'missing.json')])

    assert code == 2
    assert json.loads(capsys.readouterr().out)['status'] == 'error'


def test_render_command_rejects_invalid_bundle(tmp_path, capsys):
    bundle_path = tmp_path / 'bundle.json'
    bundle_path.write_text(json.dumps({'participants': []}), encoding='utf-8')

    code = main.main(['render', '--input', str(bundle_path)])

    assert code == 2
    assert 'Invalid submission bundle' in json.loads(capsys.readouterr().out)['message']
