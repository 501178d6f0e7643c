from unittest import mock

import requests

from medmap.config import Config, VerificationConfig
from medmap.sources import DEFAULT_SNIPPET, SourceFinder, encode_query


def test_encode_query_matches_uri_component():
    assert encode_query("Beta-blockers (ACE) & diuretics") == "Beta-blockers%20(ACE)%20%26%20diuretics"


def test_templated_sources(config):
    finder = SourceFinder(config)
    finder.session = mock.MagicMock()

    sources = finder.find("Heart Valves")

    assert [s.url for s in sources] == [
        "https://ncbi.nlm.nih.gov/search?q=Heart%20Valves",
        "https://mayoclinic.org/search?q=Heart%20Valves",
    ]
    assert all(s.snippet == DEFAULT_SNIPPET for s in sources)
    finder.session.get.assert_not_called()


def test_fetch_sources_reads_title_and_paragraph():
    config = Config(verification=VerificationConfig(fetch_sources=True, sources_per_concept=1))
    finder = SourceFinder(config)
    response = mock.MagicMock()
    response.text = (
        "<html><head><title>Hypertension - NCBI</title></head>"
        "<body><p>High blood pressure is a common condition.</p></body></html>"
    )
    finder.session = mock.MagicMock()
    finder.session.get.return_value = response

    [source] = finder.find("Hypertension")

    assert source.title == "Hypertension - NCBI"
    assert source.snippet == "High blood pressure is a common condition."
    finder.session.get.assert_called_once_with(
        "https://ncbi.nlm.nih.gov/search?q=Hypertension", timeout=10
    )


def test_failed_fetch_keeps_templated_record():
    config = Config(verification=VerificationConfig(fetch_sources=True))
    finder = SourceFinder(config)
    finder.session = mock.MagicMock()
    finder.session.get.side_effect = requests.ConnectionError("offline")

    sources = finder.find("Arrhythmia")

    assert len(sources) == 2
    assert sources[0].title == "Arrhythmia - ncbi.nlm.nih.gov"
    assert sources[0].snippet == DEFAULT_SNIPPET
