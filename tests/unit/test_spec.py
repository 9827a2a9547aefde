import pytest

from flannel_operator.flanneltpr import CustomObject, CustomObjectList
from flannel_operator.spec import ClusterSpec


RAW_SPEC = {
    "cluster": {"customer": "acme", "id": "ab12", "namespace": "ab12"},
    "bridge": {
        "docker": {"image": "quay.io/giantswarm/k8s-network-bridge:latest"},
        "spec": {
            "interface": "bond0.3",
            "privateNetwork": "10.0.4.0/24",
            "dns": {"servers": ["8.8.8.8", "1.1.1.1"]},
            "ntp": {"servers": ["0.pool.ntp.org"]},
        },
    },
    "flannel": {
        "docker": {"image": "quay.io/giantswarm/flannel:v0.9.0"},
        "spec": {
            "network": "10.1.0.0/16",
            "runDir": "/run/flannel",
            "subnetLen": 24,
            "vni": 5,
        },
    },
    "health": {"docker": {"image": "quay.io/giantswarm/k8s-health:latest"}},
}


def test_from_dict_parses_wire_layout():
    spec = ClusterSpec.from_dict(RAW_SPEC)

    assert spec.cluster.id == "ab12"
    assert spec.cluster.customer == "acme"
    assert spec.flannel.vni == 5
    assert spec.flannel.run_dir == "/run/flannel"
    assert spec.flannel.subnet_len == 24
    assert spec.bridge.interface == "bond0.3"
    assert spec.bridge.private_network == "10.0.4.0/24"
    assert spec.bridge.dns == ("8.8.8.8", "1.1.1.1")
    assert spec.bridge.ntp == ("0.pool.ntp.org",)
    assert spec.health.docker_image == "quay.io/giantswarm/k8s-health:latest"


def test_from_dict_defaults_optional_sections():
    spec = ClusterSpec.from_dict({"cluster": {"id": "x1"}, "flannel": {"spec": {"vni": 1}}})

    assert spec.bridge.dns == ()
    assert spec.bridge.ntp == ()
    assert spec.flannel.run_dir == ""
    assert spec.health.docker_image == ""


def test_from_dict_requires_cluster_id():
    with pytest.raises(ValueError, match="cluster.id"):
        ClusterSpec.from_dict({"flannel": {"spec": {"vni": 1}}})


def test_from_dict_requires_vni():
    with pytest.raises(ValueError, match="vni"):
        ClusterSpec.from_dict({"cluster": {"id": "x1"}})


def test_from_dict_rejects_negative_vni():
    with pytest.raises(ValueError):
        ClusterSpec.from_dict({"cluster": {"id": "x1"}, "flannel": {"spec": {"vni": -1}}})


def test_from_dict_rejects_invalid_dns_server():
    raw = {
        "cluster": {"id": "x1"},
        "flannel": {"spec": {"vni": 1}},
        "bridge": {"spec": {"dns": {"servers": ["not-an-ip"]}}},
    }

    with pytest.raises(ValueError, match="DNS server"):
        ClusterSpec.from_dict(raw)


def test_spec_is_immutable():
    spec = ClusterSpec.from_dict(RAW_SPEC)

    with pytest.raises(AttributeError):
        spec.cluster.id = "other"  # type: ignore[misc]


def test_custom_object_list_decoding():
    listing = CustomObjectList.from_dict(
        {
            "metadata": {"resourceVersion": "42"},
            "items": [
                {
                    "metadata": {"name": "ab12", "namespace": "default", "resourceVersion": "41"},
                    "spec": RAW_SPEC,
                }
            ],
        }
    )

    assert listing.resource_version == "42"
    assert len(listing.items) == 1
    obj = listing.items[0]
    assert isinstance(obj, CustomObject)
    assert obj.name == "ab12"
    assert obj.spec.cluster.id == "ab12"


def test_custom_object_list_skips_undecodable_items():
    listing = CustomObjectList.from_dict(
        {
            "metadata": {"resourceVersion": "42"},
            "items": [
                {"metadata": {"name": "ab12"}, "spec": RAW_SPEC},
                {"metadata": {"name": "broken"}, "spec": {"cluster": {}}},
            ],
        }
    )

    assert [obj.name for obj in listing.items] == ["ab12"]
    assert len(listing.errors) == 1
    assert listing.errors[0].startswith("broken:")
    assert listing.resource_version == "42"


def test_from_dict_treats_null_cluster_id_as_missing():
    with pytest.raises(ValueError, match="cluster.id"):
        ClusterSpec.from_dict({"cluster": {"id": None}, "flannel": {"spec": {"vni": 1}}})


def test_from_dict_reads_null_optional_fields_as_empty():
    raw = {
        "cluster": {"id": "x1", "customer": None, "namespace": None},
        "flannel": {"docker": {"image": None}, "spec": {"vni": 1, "runDir": None, "subnetLen": None}},
        "bridge": {"spec": {"interface": None, "privateNetwork": None}},
    }

    spec = ClusterSpec.from_dict(raw)

    assert spec.cluster.customer == ""
    assert spec.cluster.namespace == ""
    assert spec.flannel.docker_image == ""
    assert spec.flannel.run_dir == ""
    assert spec.flannel.subnet_len == 0
    assert spec.bridge.interface == ""
    assert spec.bridge.private_network == ""


@pytest.mark.parametrize("vni", [5.9, True, "5"])
def test_from_dict_rejects_non_integer_vni(vni):
    with pytest.raises(ValueError, match="must be an integer"):
        ClusterSpec.from_dict({"cluster": {"id": "x1"}, "flannel": {"spec": {"vni": vni}}})


def test_from_dict_rejects_non_integer_subnet_len():
    raw = {"cluster": {"id": "x1"}, "flannel": {"spec": {"vni": 1, "subnetLen": 24.5}}}

    with pytest.raises(ValueError, match="subnetLen"):
        ClusterSpec.from_dict(raw)
