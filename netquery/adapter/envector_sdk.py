# Summary of file: enVector SDK Adapter (read-side enVector API caller)

from typing import Union, List, Dict, Any
import logging
import pyenvector as ev  # pip install pyenvector

logger = logging.getLogger("netquery.adapter")


class EnVectorSDKAdapter:
    """
    Adapter class to interact with the enVector SDK.

    Every call_* method returns {"ok": True, "results": ...} on success and
    {"ok": False, "error": ...} on failure; invoke_* methods hit the SDK.
    """
    def __init__(
            self,
            address: str,
            key_id: str,
            key_path: str,
            eval_mode: str = "rmp",
            access_token: str = None,
            auto_key_setup: bool = True,
        ):
        """
        Initializes the enVector SDK connection.

        Args:
            address (str): The enVector endpoint (host:port or cloud URL).
            key_id (str): The key identifier for the enVector SDK.
            key_path (str): The path to the key files.
            eval_mode (str): The evaluation mode for the enVector SDK.
            access_token (str, optional): The access token for enVector Cloud.
            auto_key_setup (bool): Generate keys automatically when not found.
        """
        ev.init(
            address=address,
            key_path=key_path,
            key_id=key_id,
            eval_mode=eval_mode,
            auto_key_setup=auto_key_setup,
            access_token=access_token,
        )

    #--------------- Get Index List --------------#
    def call_get_index_list(self) -> Dict[str, Any]:
        """
        Calls the enVector SDK to get the list of indexes.

        Returns:
            Dict[str, Any]: If succeed, the index names. Otherwise, error message.
        """
        try:
            results = self.invoke_get_index_list()
            return self._to_json_available({"ok": True, "results": results})
        except Exception as e:
            return {"ok": False, "error": repr(e)}

    def invoke_get_index_list(self) -> List[str]:
        """
        Invokes the enVector SDK's get_index_list functionality.

        Returns:
            List[str]: List of index names from the enVector SDK.
        """
        return ev.get_index_list()

    #------------------- Search ------------------#

    def call_search(self, index_name: str, query: Union[List[float], List[List[float]]], topk: int) -> Dict[str, Any]:
        """
        Calls the enVector SDK to perform a search operation.

        Args:
            index_name (str): The name of the index to search.
            query (Union[List[float], List[List[float]]]): The search query.
            topk (int): The number of top results to return.

        Returns:
            Dict[str, Any]: If succeed, converted format of the search results. Otherwise, error message.
        """
        try:
            results = self.invoke_search(index_name=index_name, query=query, topk=topk)
            return self._to_json_available({"ok": True, "results": results})
        except Exception as e:
            return {"ok": False, "error": repr(e)}

    def invoke_search(self, index_name: str, query: Union[List[float], List[List[float]]], topk: int):
        """
        Invokes the enVector SDK's search functionality.

        Returns:
            Any: Raw search results (id, distance, metadata per hit).
        """
        index = ev.Index(index_name)
        return index.search(query, top_k=topk, output_fields=["metadata"])

    @staticmethod
    def _to_json_available(obj: Any) -> Any:
        """
        Converts an SDK object to a JSON-serializable structure where possible.
        """
        if obj is None or isinstance(obj, (str, int, float, bool)):
            return obj
        if isinstance(obj, dict):
            return {str(k): EnVectorSDKAdapter._to_json_available(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple, set)):
            return [EnVectorSDKAdapter._to_json_available(item) for item in obj]
        for attr in ("model_dump", "dict", "to_dict"):
            if hasattr(obj, attr):
                try:
                    return EnVectorSDKAdapter._to_json_available(getattr(obj, attr)())
                except Exception:
                    logger.debug("%s.%s() failed, trying next conversion", type(obj).__name__, attr)
        if hasattr(obj, "__dict__"):
            return {k: EnVectorSDKAdapter._to_json_available(v) for k, v in obj.__dict__.items() if not k.startswith("_")}
        return repr(obj)
