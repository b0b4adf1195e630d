import yaml

from mailubuilder import emit
from mailubuilder.builder import Builder


def load_docs(text):
    return [doc for doc in yaml.safe_load_all(text) if doc is not None]


class TestEmit:
    """Tests for multi-document YAML rendering."""

    def test_one_document_per_resource(self, make_config):
        graph = Builder(make_config()).run()
        docs = load_docs(emit.render(graph))
        assert len(docs) == len(graph.manifests())

    def test_namespace_first_then_grouped(self, make_config):
        docs = load_docs(emit.render(Builder(make_config()).run()))
        assert docs[0] == {'apiVersion': 'v1', 'kind': 'Namespace', 'metadata': {'name': 'mailu'}}
        assert all(d['metadata']['namespace'] == 'mailu' for d in docs[1:])

    def test_shared_environment_configmap(self, make_config):
        docs = load_docs(emit.render(Builder(make_config()).run()))
        env = next(d for d in docs if d['metadata']['name'] == 'mailu-env')
        assert env['kind'] == 'ConfigMap'
        assert env['data']['DOMAIN'] == 'example.com'
        assert env['data']['FRONT_ADDRESS'] == 'mailu-postfix.mailu.svc.cluster.local'

    def test_workload_shape(self, make_config):
        docs = load_docs(emit.render(Builder(make_config()).run()))
        deployment = next(d for d in docs if d['kind'] == 'Deployment' and d['metadata']['name'] == 'mailu-dovecot')
        container = deployment['spec']['template']['spec']['containers'][0]
        assert container['envFrom'] == [{'configMapRef': {'name': 'mailu-env'}}]
        assert container['resources'] == {'requests': {'cpu': '200m', 'memory': '1Gi'}}
        assert container['livenessProbe']['tcpSocket'] == {'port': 143}
        assert {'name': 'SECRET_KEY', 'valueFrom': {'secretKeyRef': {'name': 'mailu-secrets', 'key': 'secret-key'}}} in container['env']
        claim = deployment['spec']['template']['spec']['volumes'][0]['persistentVolumeClaim']['claimName']
        assert claim == 'mailu-dovecot-data'
        assert deployment['spec']['selector']['matchLabels']['app.kubernetes.io/name'] == 'mailu-dovecot'

    def test_config_files_keep_their_text(self, make_config):
        graph = Builder(make_config(components={'webmail': True})).run()
        docs = load_docs(emit.render(graph))
        bundle = next(d for d in docs if d['metadata']['name'] == 'mailu-dovecot-submission' and d['kind'] == 'ConfigMap')
        expected = graph.component('dovecot-submission').config_bundles[0].data['dovecot.conf']
        assert bundle['data']['dovecot.conf'] == expected

    def test_write_creates_file(self, make_config, tmp_path):
        graph = Builder(make_config()).run()
        target = emit.write(graph, tmp_path / "out" / "mailu.yml")
        assert target.read_text(encoding="utf-8") == emit.render(graph)

    def test_group_by_namespace(self):
        docs = [
            {'kind': 'A', 'metadata': {'name': 'a', 'namespace': 'one'}},
            {'kind': 'B', 'metadata': {'name': 'b', 'namespace': 'two'}},
            {'kind': 'C', 'metadata': {'name': 'c'}},
            {'kind': 'D', 'metadata': {'name': 'd', 'namespace': 'one'}},
        ]
        assert [d['kind'] for d in emit.group_by_namespace(docs)] == ['C', 'A', 'D', 'B']
