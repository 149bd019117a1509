'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY

Submit finished query strings to a SPARQL endpoint over HTTP.
'''

import logging
from typing import Any, Dict, Optional, Union

import requests

from sparql_builder.config import SparqlConfig

logger = logging.getLogger(__name__)


class SparqlTransportError(Exception):
    '''
    The endpoint could not be reached or answered with an error status.
    '''


class SparqlTransport:
    def __init__(
        self, endpoint: Optional[str] = None,
        config: Optional[SparqlConfig] = None,
    ):
        self.endpoint = endpoint
        self.config = config if config is not None else SparqlConfig()

    def submit(self, query: str) -> Union[Dict[str, Any], str]:
        '''
        Send `query` to the endpoint.

        Returns the decoded JSON body for JSON responses and the raw text
        otherwise (e.g. Turtle from CONSTRUCT or DESCRIBE).

        Raises
        ------
        ValueError
            If no endpoint is configured.
        SparqlTransportError
            If the request fails or the endpoint returns an error status.
        '''
        if not self.endpoint:
            raise ValueError('No endpoint configured for this transport.')

        headers = self.config.request_headers()
        logger.debug(
            'Submitting query to %s via %s', self.endpoint, self.config.method
        )
        try:
            if self.config.method == 'GET':
                response = requests.get(
                    self.endpoint,
                    params={'query': query},
                    headers=headers,
                    timeout=self.config.timeout,
                )
            else:
                response = requests.post(
                    self.endpoint,
                    data={'query': query},
                    headers=headers,
                    timeout=self.config.timeout,
                )
            logger.debug('Endpoint answered with HTTP %s', response.status_code)
            response.raise_for_status()

            content_type = response.headers.get('Content-Type', '')
            if 'json' in content_type:
                return response.json()
            return response.text
        except requests.exceptions.RequestException as e:
            logger.error('Query submission to %s failed: %s', self.endpoint, e)
            raise SparqlTransportError(
                f'Query submission to {self.endpoint} failed: {e}'
            ) from e
